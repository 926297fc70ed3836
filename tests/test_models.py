from swapbot.errors import SwapReverted
from swapbot.models import SessionStats, TradeDirection, TradeIntent, TradeOutcome, TransactionRecord

from conftest import make_account


def test_record_helpers():
    ok = TransactionRecord("0x1", {"status": 1, "gasUsed": 99})
    bad = TransactionRecord("0x2", {"status": 0, "gasUsed": 50})
    assert ok.succeeded and ok.gas_used == 99
    assert not bad.succeeded


def test_session_stats_counts_by_account_and_error_kind():
    a, b = make_account(1), make_account(2)
    stats = SessionStats()
    stats.record(TradeOutcome.success(TradeIntent(TradeDirection.BUY, 5), a, None))
    stats.record(TradeOutcome.failure(TradeIntent(TradeDirection.SELL, 5), a, SwapReverted("slippage")))
    stats.record(TradeOutcome.failure(TradeIntent(TradeDirection.SELL, 5), b, SwapReverted("balance")))

    assert stats.accounts["wallet-1"].buys == 1
    assert stats.accounts["wallet-1"].sells == 1
    assert stats.accounts["wallet-1"].successes == 1
    assert stats.accounts["wallet-2"].failures == {"SwapReverted": 1}
    assert (stats.total_successes, stats.total_attempts) == (1, 3)


def test_error_annotation_is_kept_once():
    err = SwapReverted("deadline passed")
    err.annotate("wallet-1", "SELL")
    err.annotate("wallet-9", "BUY")
    assert str(err) == "[wallet-1 SELL] deadline passed"
