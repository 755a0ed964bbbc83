# tests/test_transactions.py

import pytest

from migrator.execution.transactions import TransactionExecutor
from migrator.types import TransactionReverted

from tests.conftest import LP_TOKEN, NEW_PRIMARY


def test_send_returns_confirmed_receipt(chain, lp_token):
    executor = TransactionExecutor(chain)

    receipt = executor.send(lambda: chain.transact(LP_TOKEN, "erc20", "approve", NEW_PRIMARY, 5),
                            action="approve")

    assert receipt.succeeded
    assert receipt.event_names() == ["Approval"]
    assert lp_token.allowance(chain.account, NEW_PRIMARY) == 5


def test_reverted_send_raises_with_hash(chain):
    chain.revert(LP_TOKEN, "approve")
    executor = TransactionExecutor(chain)

    with pytest.raises(TransactionReverted) as exc_info:
        executor.send(lambda: chain.transact(LP_TOKEN, "erc20", "approve", NEW_PRIMARY, 5),
                      action="approve")

    assert exc_info.value.tx_hash == chain.sent[0].tx_hash
    assert "Transaction failed (reverted)" in str(exc_info.value)
    assert chain.sent[0].tx_hash in str(exc_info.value)


def test_send_never_retries(chain):
    executor = TransactionExecutor(chain)
    attempts = []

    def submit():
        attempts.append(1)
        raise ConnectionError("nonce too low")

    with pytest.raises(ConnectionError):
        executor.send(submit, action="deposit")
    assert len(attempts) == 1
