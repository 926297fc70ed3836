# swapbot/errors.py
"""
Error taxonomy for the trading loop.

Everything under TradeError is recovered at the executor boundary: the attempt
for that tick is abandoned, logged, and the loop moves on. FatalControlError
and ConfigurationError are the only ways the process stops.
"""
from typing import Optional


class TradeError(Exception):
    """Base class for per-trade failures."""

    def __init__(self, message: str, account: Optional[str] = None, direction: Optional[str] = None):
        super().__init__(message)
        self.account = account
        self.direction = direction

    def annotate(self, account: str, direction: str) -> "TradeError":
        """Attach the account identity and attempted direction if not already set."""
        if self.account is None:
            self.account = account
        if self.direction is None:
            self.direction = direction
        return self

    def __str__(self):
        base = super().__str__()
        if self.account is None:
            return base
        return f"[{self.account} {self.direction}] {base}"


class QuoteUnavailable(TradeError):
    """The pricing call reverted (e.g. no liquidity) or the network call failed."""


class AuthorizationFailed(TradeError):
    """The allowance read or the approval transaction failed."""


class SwapReverted(TradeError):
    """The swap failed on chain: slippage, deadline, balance or allowance."""

    def __init__(self, message: str, tx_hash: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.tx_hash = tx_hash


class GatewayUnavailable(TradeError):
    """Underlying RPC / network failure at any step."""


class FatalControlError(Exception):
    """A defect in the scheduler's own control logic. Terminates the process."""


class ConfigurationError(Exception):
    """Required startup input is missing or invalid."""
