# swapbot/models.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class TradeDirection(Enum):
    """
    Which side of the pair is spent.
    BUY spends the base currency for the token, SELL the reverse.
    """
    BUY = "BUY"
    SELL = "SELL"


@dataclass(frozen=True, slots=True)
class Account:
    """
    A funded identity. Built once at startup from the key list and never mutated.
    The signer holds the key material, so it is kept out of repr.
    """
    label: str
    address: str
    signer: Any = field(repr=False, compare=False)


@dataclass(slots=True)
class TradeIntent:
    direction: TradeDirection
    amount: int  # smallest unit of the spent asset


@dataclass(slots=True)
class Quote:
    """Valid only for the instant it was fetched. Never cached across ticks."""
    input_amount: int
    expected_output_amount: int


@dataclass(slots=True)
class TransactionRecord:
    hash: str
    receipt: Dict[str, Any]

    @property
    def gas_used(self) -> int:
        return int(self.receipt.get("gasUsed", 0))

    @property
    def succeeded(self) -> bool:
        return self.receipt.get("status", 1) == 1


@dataclass(slots=True)
class TradeOutcome:
    """
    Result of one trade attempt. Exactly one of `record` / `error` is set,
    except for dry runs which succeed without a record.
    """
    account: Account
    direction: TradeDirection
    amount: int
    record: Optional[TransactionRecord] = None
    error: Optional[Exception] = None
    dry_run: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, intent: TradeIntent, account: Account, record: Optional[TransactionRecord], dry_run: bool = False) -> "TradeOutcome":
        return cls(account, intent.direction, intent.amount, record=record, dry_run=dry_run)

    @classmethod
    def failure(cls, intent: TradeIntent, account: Account, error: Exception) -> "TradeOutcome":
        return cls(account, intent.direction, intent.amount, error=error)


@dataclass(slots=True)
class AccountStats:
    attempts: int = 0
    successes: int = 0
    buys: int = 0
    sells: int = 0
    failures: Dict[str, int] = field(default_factory=dict)


class SessionStats:
    """
    In-memory counters for the running session, keyed by account label.
    Nothing here is written to disk.
    """
    def __init__(self):
        self.accounts: Dict[str, AccountStats] = {}
        self.cycles = 0

    def record(self, outcome: TradeOutcome):
        stats = self.accounts.setdefault(outcome.account.label, AccountStats())
        stats.attempts += 1
        if outcome.direction is TradeDirection.BUY:
            stats.buys += 1
        else:
            stats.sells += 1

        if outcome.ok:
            stats.successes += 1
        else:
            kind = type(outcome.error).__name__
            stats.failures[kind] = stats.failures.get(kind, 0) + 1

    @property
    def total_attempts(self) -> int:
        return sum(s.attempts for s in self.accounts.values())

    @property
    def total_successes(self) -> int:
        return sum(s.successes for s in self.accounts.values())
