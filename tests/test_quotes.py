import asyncio
from decimal import Decimal

import pytest
from web3.exceptions import ContractLogicError

from swapbot.errors import GatewayUnavailable, QuoteUnavailable
from swapbot.quotes import QuoteResolver, min_acceptable_output

from conftest import BASE, TOKEN, FakeGateway


def test_min_output_for_1000_is_950():
    assert min_acceptable_output(1000) == 950


@pytest.mark.parametrize("expected", [0, 1, 19, 20, 21, 999, 10 ** 18 + 7, 2 ** 200 + 3])
def test_min_output_is_floor_of_95_percent(expected):
    assert min_acceptable_output(expected) == expected * 95 // 100


def test_min_output_is_exact_for_uint256_sized_quotes():
    expected = 123456789012345678901234567891
    assert min_acceptable_output(expected) == 117283949561728394956172839496
    assert min_acceptable_output(2 ** 256 - 1) == (2 ** 256 - 1) * 95 // 100


def test_min_output_custom_tolerance():
    assert min_acceptable_output(1000, Decimal("0.1")) == 900
    assert min_acceptable_output(1000, Decimal("0")) == 1000
    assert min_acceptable_output(10 ** 30 + 1, Decimal("0.003")) == (10 ** 30 + 1) * 997 // 1000


def test_min_output_rejects_negative():
    with pytest.raises(ValueError):
        min_acceptable_output(-1)


def test_quote_uses_last_amount_on_path(logger):
    gateway = FakeGateway(expected_out=4242)
    resolver = QuoteResolver(gateway, logger)

    quote = asyncio.run(resolver.get_quote(10 ** 16, [BASE, TOKEN]))

    assert quote.input_amount == 10 ** 16
    assert quote.expected_output_amount == 4242
    assert gateway.calls == [("get_amounts_out", 10 ** 16, [BASE, TOKEN])]


def test_quote_revert_becomes_quote_unavailable(logger):
    gateway = FakeGateway(quote_error=ContractLogicError("execution reverted: INSUFFICIENT_LIQUIDITY"))
    resolver = QuoteResolver(gateway, logger)

    with pytest.raises(QuoteUnavailable):
        asyncio.run(resolver.get_expected_output(5, [TOKEN, BASE]))


def test_quote_network_failure_becomes_quote_unavailable(logger):
    gateway = FakeGateway(quote_error=GatewayUnavailable("getAmountsOut failed: timeout"))
    resolver = QuoteResolver(gateway, logger)

    with pytest.raises(QuoteUnavailable):
        asyncio.run(resolver.get_expected_output(5, [TOKEN, BASE]))


def test_quote_rejects_non_positive_input_without_calling(logger):
    gateway = FakeGateway()
    resolver = QuoteResolver(gateway, logger)

    with pytest.raises(QuoteUnavailable):
        asyncio.run(resolver.get_expected_output(0, [BASE, TOKEN]))
    assert gateway.calls == []
