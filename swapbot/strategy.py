# swapbot/strategy.py
import random
from dataclasses import dataclass
from decimal import Decimal

from .execution import TradeExecutor
from .models import Account, TradeDirection, TradeOutcome

BASE_CURRENCY_DECIMALS = 18


def to_units(amount: Decimal, decimals: int) -> int:
    """Human amount -> smallest unit (e.g. 0.01 ETH -> 10**16 wei)."""
    return int(Decimal(amount) * (Decimal(10) ** decimals))


@dataclass(frozen=True, slots=True)
class AmountLimits:
    """Upper bounds per direction, already in smallest units."""
    max_buy: int
    max_sell: int

    @classmethod
    def from_settings(cls, settings) -> "AmountLimits":
        return cls(
            max_buy=to_units(settings.max_buy_amount, BASE_CURRENCY_DECIMALS),
            max_sell=to_units(settings.max_sell_amount, settings.token_decimals),
        )


def draw_direction(rng: random.Random, buy_probability: float = 0.7) -> TradeDirection:
    """BUY with `buy_probability`, otherwise SELL. Balances are not consulted."""
    return TradeDirection.BUY if rng.random() < buy_probability else TradeDirection.SELL


def draw_amount(rng: random.Random, direction: TradeDirection, limits: AmountLimits) -> int:
    """Uniform over (0, max] in smallest units, so never zero."""
    upper = limits.max_buy if direction is TradeDirection.BUY else limits.max_sell
    return rng.randint(1, upper)


class TradeSelector:
    """
    One decision per scheduling tick: coin-flip the direction, pick a size,
    hand it to the executor. Errors are already contained by the executor.
    """
    def __init__(self, executor: TradeExecutor, logger, limits: AmountLimits,
                 buy_probability: float = 0.7, rng: random.Random = None):
        self.executor = executor
        self.logger = logger
        self.limits = limits
        self.buy_probability = buy_probability
        self.rng = rng or random.Random()

    async def select_and_run(self, account: Account) -> TradeOutcome:
        direction = draw_direction(self.rng, self.buy_probability)
        amount = draw_amount(self.rng, direction, self.limits)
        self.logger.debug(f"Selected {direction.value} | account={account.label} amount={amount}")
        return await self.executor.execute(direction, account, amount)
