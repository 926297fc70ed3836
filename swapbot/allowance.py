# swapbot/allowance.py
from web3.exceptions import Web3Exception

from .errors import AuthorizationFailed, GatewayUnavailable
from .models import Account

MAX_UINT256 = 2 ** 256 - 1


class AuthorizationManager:
    """
    Makes sure the spender may move enough of the account's tokens before a sell.
    Only sends an approval when the current allowance falls short, so calling it
    again with enough allowance already in place costs nothing.
    """
    def __init__(self, gateway, logger, unlimited: bool = False):
        self.gateway = gateway
        self.logger = logger
        self.unlimited = unlimited

    async def ensure_allowance(self, account: Account, spender: str, required_amount: int):
        try:
            current = await self.gateway.allowance(account.address, spender)
        except (Web3Exception, GatewayUnavailable) as e:
            raise AuthorizationFailed(f"Could not read allowance: {e}") from e

        if current >= required_amount:
            self.logger.debug(f"Allowance OK | account={account.label} current={current} required={required_amount}")
            return

        amount = MAX_UINT256 if self.unlimited else required_amount
        self.logger.info(f"🔑 Approving | account={account.label} spender={spender} amount={amount} (current={current})")

        try:
            pending = await self.gateway.approve(account, spender, amount)
            self.logger.info(f"Approval transaction sent | account={account.label} tx={pending.hash}")
            receipt = await pending.wait()
        except (Web3Exception, GatewayUnavailable) as e:
            raise AuthorizationFailed(f"Approval transaction failed: {e}") from e

        if receipt.get("status", 1) != 1:
            raise AuthorizationFailed(f"Approval transaction reverted: {pending.hash}")

        self.logger.info(f"✅ Token approval confirmed | account={account.label} tx={pending.hash}")
