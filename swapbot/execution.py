# swapbot/execution.py
import time
from decimal import Decimal
from typing import Callable, List, Optional

from web3.exceptions import ContractLogicError, Web3RPCError

from .allowance import AuthorizationManager
from .errors import SwapReverted, TradeError
from .models import Account, TradeDirection, TradeIntent, TradeOutcome, TransactionRecord
from .quotes import QuoteResolver, min_acceptable_output


class TradeExecutor:
    """
    Places a single swap for one account.

    This is the isolation boundary of the bot: whatever goes wrong inside
    `execute` (bad quote, failed approval, revert, RPC outage) is logged with
    the account and direction and handed back as a failed TradeOutcome.
    Nothing raised here reaches the scheduler.
    """
    def __init__(self, gateway, logger, settings,
                 quotes: Optional[QuoteResolver] = None,
                 authorization: Optional[AuthorizationManager] = None,
                 clock: Callable[[], float] = time.time):
        self.gateway = gateway
        self.logger = logger
        self.base_currency = settings.base_currency_address
        self.token = settings.token_address
        self.router = settings.router_address
        self.slippage = Decimal(settings.slippage_tolerance)
        self.deadline_seconds = settings.deadline_seconds
        self.gas_limit = settings.gas_limit
        self.dry_run = settings.dry_run
        self.quotes = quotes or QuoteResolver(gateway, logger)
        self.authorization = authorization or AuthorizationManager(gateway, logger, settings.unlimited_approval)
        self.clock = clock

    def build_path(self, direction: TradeDirection) -> List[str]:
        if direction is TradeDirection.BUY:
            return [self.base_currency, self.token]
        return [self.token, self.base_currency]

    async def execute(self, direction: TradeDirection, account: Account, amount: int) -> TradeOutcome:
        """
        Runs one trade attempt end to end.

        Returns:
            TradeOutcome with the confirmed TransactionRecord, or with the error.
        """
        intent = TradeIntent(direction, amount)
        self.logger.info(f"⚡ Executing {direction.value.lower()} | account={account.label} address={account.address} amount={amount}")

        try:
            record = await self._execute(intent, account)

        except TradeError as e:
            e.annotate(account.label, direction.value)
            self.logger.error(f"❌ {type(e).__name__} {e}")
            return TradeOutcome.failure(intent, account, e)

        except Exception as e:
            # Anything unclassified is still contained to this account's turn
            err = TradeError(f"Unexpected {type(e).__name__}: {e}", account.label, direction.value)
            err.__cause__ = e
            self.logger.exception(f"❌ {err}")
            return TradeOutcome.failure(intent, account, err)

        return TradeOutcome.success(intent, account, record, dry_run=record is None)

    async def _execute(self, intent: TradeIntent, account: Account) -> Optional[TransactionRecord]:
        direction, amount = intent.direction, intent.amount
        path = self.build_path(direction)

        if direction is TradeDirection.SELL and not self.dry_run:
            await self.authorization.ensure_allowance(account, self.router, amount)

        quote = await self.quotes.get_quote(amount, path)
        min_out = min_acceptable_output(quote.expected_output_amount, self.slippage)
        deadline = int(self.clock()) + self.deadline_seconds

        if self.dry_run:
            self.logger.info(f"🔵 DRY RUN | account={account.label} direction={direction.value} "
                             f"in={amount} expected_out={quote.expected_output_amount} min_out={min_out}")
            return None

        try:
            if direction is TradeDirection.BUY:
                pending = await self.gateway.swap_exact_eth_for_tokens(
                    account, min_out, path, deadline, value=amount, gas_limit=self.gas_limit)
            else:
                pending = await self.gateway.swap_exact_tokens_for_eth(
                    account, amount, min_out, path, deadline, gas_limit=self.gas_limit)
        except (ContractLogicError, Web3RPCError) as e:
            raise SwapReverted(f"Swap rejected on submission: {e}") from e

        self.logger.info(f"{direction.value.capitalize()} transaction sent | account={account.label} tx={pending.hash} min_out={min_out}")
        receipt = await pending.wait()
        record = TransactionRecord(hash=pending.hash, receipt=receipt)

        if not record.succeeded:
            raise SwapReverted(f"Swap reverted on chain (gas used: {record.gas_used})", tx_hash=pending.hash)

        self.logger.info(f"✅ {direction.value.capitalize()} transaction confirmed | account={account.label} tx={pending.hash} gas_used={record.gas_used}")
        return record
