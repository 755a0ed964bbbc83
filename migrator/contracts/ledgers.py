# migrator/contracts/ledgers.py
"""
Typed views of the contracts the migration touches.

Read methods return msgspec structs; write methods submit the call and return
the transaction hash, so they are meant to be wrapped in a factory and passed
to TransactionExecutor.send().
"""

from typing import List, Sequence

from ..clients.interfaces import LedgerClientInterface
from ..types import (
    EvmAddress,
    EvmHash,
    ZERO_ADDRESS,
    PrimaryPoolInfo,
    PrimaryUserInfo,
    SecondaryPoolInfo,
    SecondaryUserPool,
    RegularSchedule,
    PairReserves,
)
from .abi_loader import MASTERCHEF_ABI, SOUSCHEF_ABI, ERC20_ABI, TICKET_ABI, PAIR_ABI


class ContractView:
    abi_name: str = ""

    def __init__(self, client: LedgerClientInterface, address: str):
        self.client = client
        self.address = EvmAddress(address)

    def _call(self, function_name: str, *args):
        return self.client.call(self.address, self.abi_name, function_name, *args)

    def _transact(self, function_name: str, *args) -> EvmHash:
        return self.client.transact(self.address, self.abi_name, function_name, *args)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.address})"


class PrimaryLedger(ContractView):
    """MasterChef-style ledger: LP staking plus ticket (NFT) staking for VIP pools"""
    abi_name = MASTERCHEF_ABI

    def pool_length(self) -> int:
        return int(self._call("poolLength"))

    def pool_info(self, pid: int) -> PrimaryPoolInfo:
        info = self._call("poolInfo", pid)
        ticket = info.get("ticket")
        return PrimaryPoolInfo(
            lp_token=EvmAddress(info["lpToken"]),
            alloc_point=int(info["allocPoint"]),
            pool_type=int(info["pooltype"]),
            ticket=EvmAddress(ticket) if ticket and ticket != ZERO_ADDRESS else None,
        )

    def user_info(self, pid: int, account: str) -> PrimaryUserInfo:
        info = self._call("userInfo", pid, account)
        return PrimaryUserInfo(amount=int(info["amount"]))

    def staked_tickets(self, account: str, ticket: str) -> List[int]:
        return [int(token_id) for token_id in self._call("ticket_staked_array", account, ticket)]

    def withdraw(self, pid: int, amount: int) -> EvmHash:
        return self._transact("withdraw", pid, amount)

    def deposit(self, pid: int, amount: int) -> EvmHash:
        return self._transact("deposit", pid, amount)

    def withdraw_ticket(self, pid: int, token_id: int) -> EvmHash:
        return self._transact("withdraw_tickets", pid, token_id)

    def deposit_all_tickets(self, ticket: str) -> EvmHash:
        return self._transact("deposit_all_tickets", ticket)


class SecondaryLedger(ContractView):
    """SousChef-style ledger: single-token staking with lock and redemption schedules"""
    abi_name = SOUSCHEF_ABI

    def pool_length(self) -> int:
        return int(self._call("poolLength"))

    def pool_info(self, pid: int) -> SecondaryPoolInfo:
        info = self._call("pools", pid)
        return SecondaryPoolInfo(
            token=EvmAddress(info["token"]),
            alloc_point=int(info["allocPoint"]),
            pool_type=int(info["poolType"]),
            redemption_period=int(info.get("redemptionPeriod") or 0),
        )

    def user_pool(self, account: str, pid: int) -> SecondaryUserPool:
        info = self._call("userPools", account, pid)
        return SecondaryUserPool(deposit=int(info["deposit"]), reward=int(info.get("reward") or 0))

    def unlock_time(self, account: str, pid: int) -> int:
        return int(self._call("userNoFeeTime", account, pid))

    def user_pool_regular(self, account: str, pid: int) -> List[int]:
        return [int(value) for value in self._call("getUserPoolRegular", account, pid)]

    def user_regular(self, account: str, regular_id: int) -> RegularSchedule:
        info = self._call("userRegluars", account, regular_id)
        return RegularSchedule(
            redemption_start=int(info["redemptionStart"]),
            redemption_end=int(info["redemptionEnd"]),
            amount=int(info["amount"]),
        )

    def pending_reward(self, pid: int, account: str) -> int:
        return int(self._call("pendingV42", pid, account) or 0)

    def claim_pair(self) -> EvmAddress:
        return EvmAddress(self._call("V42_USDT"))

    def withdraw(self, pid: int, amount: int, regular_ids: Sequence[int],
                 is_lp: bool = False, is_weth: bool = False) -> EvmHash:
        return self._transact("withdraw", pid, amount, list(regular_ids), is_lp, is_weth)

    def deposit(self, pid: int, amount: int) -> EvmHash:
        return self._transact("deposit", pid, amount, [ZERO_ADDRESS, ZERO_ADDRESS], [0, 0])

    def safe_claim(self, reserve_bands: Sequence[int], pids: Sequence[int],
                   amounts: Sequence[int], lp_pid: int, account: str) -> EvmHash:
        return self._transact("safeClaim", list(reserve_bands), list(pids), list(amounts), lp_pid, account)


class Erc20Token(ContractView):
    abi_name = ERC20_ABI

    def balance_of(self, account: str) -> int:
        return int(self._call("balanceOf", account))

    def allowance(self, owner: str, spender: str) -> int:
        return int(self._call("allowance", owner, spender))

    def approve(self, spender: str, amount: int) -> EvmHash:
        return self._transact("approve", spender, amount)


class TicketCollection(ContractView):
    """ERC721 staking tickets held by VIP pool participants"""
    abi_name = TICKET_ABI

    def tokens_of_owner(self, owner: str) -> List[int]:
        return [int(token_id) for token_id in self._call("tokensOfOwner", owner)]

    def is_approved_for_all(self, owner: str, operator: str) -> bool:
        return bool(self._call("isApprovedForAll", owner, operator))

    def get_approved(self, token_id: int) -> EvmAddress:
        return EvmAddress(self._call("getApproved", token_id))

    def set_approval_for_all(self, operator: str, approved: bool = True) -> EvmHash:
        return self._transact("setApprovalForAll", operator, approved)

    def approve(self, to: str, token_id: int) -> EvmHash:
        return self._transact("approve", to, token_id)


class LiquidityPair(ContractView):
    abi_name = PAIR_ABI

    def reserves(self) -> PairReserves:
        reserves = self._call("getReserves")
        return PairReserves(reserve0=int(reserves["_reserve0"]), reserve1=int(reserves["_reserve1"]))
