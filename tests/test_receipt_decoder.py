# tests/test_receipt_decoder.py

from hexbytes import HexBytes
from web3 import Web3

from migrator.contracts.abi_loader import ABILoader, MASTERCHEF_ABI
from migrator.contracts.registry import ContractRegistry
from migrator.decode.amounts import ResolutionSource, resolve_withdrawn_amount
from migrator.decode.receipt_decoder import ReceiptDecoder

from tests.conftest import OLD_PRIMARY, E18
from tests.fakes import ACCOUNT, addr


def word(value: int) -> bytes:
    return value.to_bytes(32, "big")


def withdraw_log(address, pid, amount, event="Withdraw(address,uint256,uint256)", log_index=0):
    return {
        "address": Web3.to_checksum_address(address),
        "topics": [
            Web3.keccak(text=event),
            HexBytes(word(int(ACCOUNT, 16))),
            HexBytes(word(pid)),
        ],
        "data": HexBytes(word(amount)),
        "logIndex": log_index,
        "transactionIndex": 0,
        "transactionHash": HexBytes(word(1)),
        "blockHash": HexBytes(word(2)),
        "blockNumber": 7,
    }


def raw_receipt(*logs, status=1):
    return {
        "transactionHash": HexBytes(word(1)),
        "status": status,
        "blockNumber": 7,
        "logs": list(logs),
    }


def make_decoder():
    registry = ContractRegistry()
    registry.register(OLD_PRIMARY, MASTERCHEF_ABI)
    return ReceiptDecoder(registry, ABILoader())


def test_decodes_registered_withdraw_event():
    receipt = make_decoder().decode_receipt(raw_receipt(withdraw_log(OLD_PRIMARY, 3, 10 * E18)))

    assert receipt.succeeded
    assert receipt.tx_hash == "0x" + "00" * 31 + "01"
    assert receipt.block_number == 7
    event = receipt.events[0]
    assert event.name == "Withdraw"
    assert event.args["pid"] == 3
    assert event.args["amount"] == 10 * E18
    assert event.address == OLD_PRIMARY


def test_distinguishes_events_by_signature():
    log = withdraw_log(OLD_PRIMARY, 3, 5, event="EmergencyWithdraw(address,uint256,uint256)")

    receipt = make_decoder().decode_receipt(raw_receipt(log))

    assert receipt.event_names() == ["EmergencyWithdraw"]


def test_unregistered_contract_logs_stay_unnamed():
    receipt = make_decoder().decode_receipt(raw_receipt(withdraw_log(addr("dead"), 3, 5)))

    assert receipt.events[0].name is None
    assert receipt.events[0].args == {}


def test_decoded_receipt_feeds_amount_resolution():
    receipt = make_decoder().decode_receipt(raw_receipt(
        withdraw_log(addr("dead"), 3, 1, log_index=0),
        withdraw_log(OLD_PRIMARY, 3, 4 * E18, log_index=1),
    ))

    resolution = resolve_withdrawn_amount(receipt, expected_position_id=3, staked_amount=5 * E18)

    assert resolution.amount == 4 * E18
    assert resolution.source is ResolutionSource.MATCHING_EVENT


def test_reverted_status_is_preserved():
    receipt = make_decoder().decode_receipt(raw_receipt(status=0))

    assert not receipt.succeeded
    assert receipt.events == []
