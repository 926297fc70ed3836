# swapbot/quotes.py
from decimal import Decimal
from typing import List

from web3.exceptions import ContractLogicError

from .errors import GatewayUnavailable, QuoteUnavailable
from .models import Quote

SLIPPAGE_TOLERANCE = Decimal("0.05")


def min_acceptable_output(expected_output: int, slippage: Decimal = SLIPPAGE_TOLERANCE) -> int:
    """
    floor(expected_output * (1 - slippage)), exact for integer amounts.
    This is the only price protection: the swap reverts on chain below it.
    """
    if expected_output < 0:
        raise ValueError(f"expected_output must be non-negative, got {expected_output}")
    # integer ratio keeps uint256-sized quotes exact (0.95 -> 19/20)
    num, den = (Decimal(1) - Decimal(str(slippage))).as_integer_ratio()
    return expected_output * num // den


class QuoteResolver:
    """
    Read-only pricing against the router. One call per trade attempt,
    no retries and no caching since the price moves between ticks.
    """
    def __init__(self, gateway, logger):
        self.gateway = gateway
        self.logger = logger

    async def get_expected_output(self, amount_in: int, path: List[str]) -> int:
        return (await self.get_quote(amount_in, path)).expected_output_amount

    async def get_quote(self, amount_in: int, path: List[str]) -> Quote:
        if amount_in <= 0:
            raise QuoteUnavailable(f"Input amount must be positive, got {amount_in}")

        try:
            amounts = await self.gateway.get_amounts_out(amount_in, path)
        except ContractLogicError as e:
            raise QuoteUnavailable(f"Pricing call reverted (no liquidity?): {e}") from e
        except GatewayUnavailable as e:
            raise QuoteUnavailable(f"Pricing call failed: {e}") from e

        if not amounts or len(amounts) < len(path):
            raise QuoteUnavailable(f"Malformed quote for path {path}: {amounts}")

        expected = int(amounts[-1])
        if expected < 0:
            raise QuoteUnavailable(f"Negative quote for path {path}: {expected}")

        self.logger.debug(f"Quote | in={amount_in} out={expected} path={'->'.join(path)}")
        return Quote(input_amount=amount_in, expected_output_amount=expected)
