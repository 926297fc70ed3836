# swapbot/scheduler.py
import asyncio
import random
from enum import Enum
from typing import Awaitable, Callable, List, Optional

from .errors import FatalControlError
from .models import Account, SessionStats, TradeOutcome
from .strategy import TradeSelector


class LoopState(Enum):
    RUNNING = "RUNNING"
    TERMINATED = "TERMINATED"


class SchedulerLoop:
    """
    Round-robin over the fixed account list, one trade at a time system-wide.

    Each account's attempt fully resolves before the randomized pause that
    precedes the next account's turn, so there is never more than one open
    transaction and no nonce races between accounts.
    """
    def __init__(self, accounts: List[Account], selector: TradeSelector, logger,
                 min_delay: float = 30.0, max_delay: float = 90.0,
                 rng: random.Random = None,
                 sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
                 stats: Optional[SessionStats] = None,
                 on_cycle_complete: Optional[Callable[[SessionStats], None]] = None):
        self.accounts = list(accounts)
        self.selector = selector
        self.logger = logger
        self.min_delay = min_delay
        self.max_delay = max_delay
        self.rng = rng or random.Random()
        self.sleep = sleep
        self.stats = stats or SessionStats()
        self.on_cycle_complete = on_cycle_complete
        # None until run() starts and again after a bounded run returns
        self.state: Optional[LoopState] = None

    def next_delay(self) -> float:
        return self.rng.uniform(self.min_delay, self.max_delay)

    async def run(self, cycles: Optional[int] = None):
        """
        Runs forever, or for `cycles` full passes over the account list.
        Any error escaping here is a defect in the loop itself: it is raised as
        FatalControlError and the state becomes TERMINATED.
        """
        self.state = LoopState.RUNNING
        self.logger.info(f"🚀 Scheduler started | accounts={len(self.accounts)} delay={self.min_delay:.0f}-{self.max_delay:.0f}s")

        try:
            if not self.accounts:
                raise ValueError("account list is empty")

            cycle = 0
            while cycles is None or cycle < cycles:
                await self._run_cycle(cycle)
                cycle += 1

        except Exception as e:
            self.state = LoopState.TERMINATED
            self.logger.critical(f"💀 Fatal error in scheduler loop: {type(e).__name__}: {e}")
            raise FatalControlError(f"Scheduler loop terminated: {e}") from e

        self.state = None

    async def _run_cycle(self, cycle: int):
        for index, account in enumerate(self.accounts):
            outcome = await self.selector.select_and_run(account)
            if not isinstance(outcome, TradeOutcome):
                raise TypeError(f"selector returned {type(outcome).__name__}, expected TradeOutcome")
            self.stats.record(outcome)

            delay = self.next_delay()
            self.logger.info(f"⏳ cycle={cycle} turn={index + 1}/{len(self.accounts)} account={account.label} "
                             f"ok={outcome.ok} | next turn in {delay:.1f}s")
            await self.sleep(delay)

        self.stats.cycles = cycle + 1
        if self.on_cycle_complete is not None:
            self.on_cycle_complete(self.stats)
