# swapbot/accounts.py
from typing import List

from eth_account import Account as EthAccount

from .errors import ConfigurationError
from .models import Account


def load_accounts(private_keys: List[str]) -> List[Account]:
    """
    Turns the ordered key list into Accounts (wallet-1, wallet-2, ...).
    List order is preserved since it is the scheduling order.
    A key that appears twice is rejected, since it would get two turns per cycle.
    """
    accounts: List[Account] = []
    seen = set()

    for i, key in enumerate(private_keys, start=1):
        try:
            signer = EthAccount.from_key(key)
        except (ValueError, TypeError) as e:
            # Never echo the key itself
            raise ConfigurationError(f"Private key #{i} is not a valid key") from e

        if signer.address in seen:
            raise ConfigurationError(f"Private key #{i} duplicates an earlier key ({signer.address})")
        seen.add(signer.address)
        accounts.append(Account(label=f"wallet-{len(accounts) + 1}", address=signer.address, signer=signer))

    if not accounts:
        raise ConfigurationError("No account keys were loaded")
    return accounts
