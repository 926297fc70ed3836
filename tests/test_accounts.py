import pytest
from eth_account import Account as EthAccount

from swapbot.accounts import load_accounts
from swapbot.errors import ConfigurationError

KEYS = ["0x" + "11" * 32, "0x" + "22" * 32, "0x" + "33" * 32]


def test_accounts_keep_key_order():
    accounts = load_accounts(KEYS)

    assert [a.label for a in accounts] == ["wallet-1", "wallet-2", "wallet-3"]
    assert [a.address for a in accounts] == [EthAccount.from_key(k).address for k in KEYS]


def test_duplicate_key_is_configuration_error():
    with pytest.raises(ConfigurationError) as exc:
        load_accounts([KEYS[0], KEYS[1], KEYS[0]])
    assert "#3" in str(exc.value)
    assert "11" * 32 not in str(exc.value)


def test_repr_does_not_leak_key_material():
    account = load_accounts([KEYS[0]])[0]
    assert "11" * 32 not in repr(account)


def test_invalid_key_is_configuration_error():
    with pytest.raises(ConfigurationError) as exc:
        load_accounts(["0xnothex"])
    assert "nothex" not in str(exc.value)


def test_empty_list_is_configuration_error():
    with pytest.raises(ConfigurationError):
        load_accounts([])
