import logging

import pytest

from swapbot.config import Settings
from swapbot.errors import GatewayUnavailable
from swapbot.models import Account

ROUTER = "0x3333333333333333333333333333333333333333"
BASE = "0x2222222222222222222222222222222222222222"
TOKEN = "0x1111111111111111111111111111111111111111"
NOW = 1_700_000_000


def make_settings(**overrides) -> Settings:
    values = dict(
        network="testnet",
        rpc_url="http://localhost:8545",
        router_address=ROUTER,
        base_currency_address=BASE,
        token_address=TOKEN,
        private_keys=["0x" + "11" * 32],
    )
    values.update(overrides)
    return Settings(**values)


def make_account(n: int = 1) -> Account:
    return Account(label=f"wallet-{n}", address="0x" + f"{n:040x}", signer=None)


class FakePending:
    def __init__(self, tx_hash, receipt=None, error=None, on_confirm=None):
        self.hash = tx_hash
        self.receipt = receipt if receipt is not None else {"status": 1, "gasUsed": 21000}
        self.error = error
        self.on_confirm = on_confirm

    async def wait(self):
        if self.error is not None:
            raise self.error
        if self.on_confirm is not None:
            self.on_confirm()
        return self.receipt


class FakeGateway:
    """Records every call. Approvals raise the allowance once confirmed."""

    def __init__(self, expected_out=1000, allowance=0, quote_error=None, allowance_error=None,
                 approve_error=None, approve_status=1, swap_error=None, swap_status=1, failing_owner=None):
        self.expected_out = expected_out
        self.allowance_value = allowance
        self.quote_error = quote_error
        self.allowance_error = allowance_error
        self.approve_error = approve_error
        self.approve_status = approve_status
        self.swap_error = swap_error
        self.swap_status = swap_status
        self.failing_owner = failing_owner
        self.calls = []

    def count(self, name):
        return sum(1 for c in self.calls if c[0] == name)

    def named(self, name):
        return [c for c in self.calls if c[0] == name]

    async def get_amounts_out(self, amount_in, path):
        self.calls.append(("get_amounts_out", amount_in, list(path)))
        if self.quote_error is not None:
            raise self.quote_error
        return [amount_in, self.expected_out]

    async def allowance(self, owner, spender):
        self.calls.append(("allowance", owner, spender))
        if self.allowance_error is not None:
            raise self.allowance_error
        return self.allowance_value

    async def approve(self, account, spender, amount):
        self.calls.append(("approve", account.address, spender, amount))
        if self.approve_error is not None:
            raise self.approve_error

        def confirm():
            if self.approve_status == 1:
                self.allowance_value = amount

        return FakePending(f"0xapprove{len(self.calls)}", receipt={"status": self.approve_status, "gasUsed": 46000}, on_confirm=confirm)

    async def swap_exact_eth_for_tokens(self, account, amount_out_min, path, deadline, value, gas_limit):
        self.calls.append(("swap_exact_eth_for_tokens", account.address, amount_out_min, list(path), deadline, value, gas_limit))
        return self._swap(account)

    async def swap_exact_tokens_for_eth(self, account, amount_in, amount_out_min, path, deadline, gas_limit):
        self.calls.append(("swap_exact_tokens_for_eth", account.address, amount_in, amount_out_min, list(path), deadline, gas_limit))
        return self._swap(account)

    def _swap(self, account):
        if self.failing_owner == account.address:
            raise GatewayUnavailable("connection reset")
        if self.swap_error is not None:
            raise self.swap_error
        return FakePending(f"0xswap{len(self.calls)}", receipt={"status": self.swap_status, "gasUsed": 120000})


@pytest.fixture
def logger():
    return logging.getLogger("swapbot.tests")


@pytest.fixture
def settings():
    return make_settings()
