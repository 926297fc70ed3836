# main.py
import argparse
import asyncio
import sys

import questionary
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from swapbot.accounts import load_accounts
from swapbot.chain_gateway import ChainGateway
from swapbot.config import load_settings
from swapbot.errors import ConfigurationError, FatalControlError
from swapbot.execution import TradeExecutor
from swapbot.logger import setup_console_logger
from swapbot.models import SessionStats
from swapbot.scheduler import SchedulerLoop
from swapbot.strategy import AmountLimits, TradeSelector

# --- UI HELPER FUNCTIONS ---

def startup_selection(accounts):
    """Interactive CLI to pick which wallets take part in this session."""
    print("\n🎲 RANDOM SWAP FLEET \n")
    choices = [questionary.Choice(f"{a.label}  {a.address}", value=a.address, checked=True) for a in accounts]
    picked = questionary.checkbox("Select Wallets to Trade With:", choices=choices).ask()
    if not picked:
        print("No wallets selected. Exiting.")
        sys.exit()
    # Keep the configured order, it is the scheduling order
    return [a for a in accounts if a.address in picked]


def generate_startup_panel(settings, accounts):
    mode = "[yellow]DRY RUN[/yellow]" if settings.dry_run else "[bold red]LIVE[/bold red]"
    body = (
        f"Network: [cyan]{settings.network}[/cyan]   Mode: {mode}\n"
        f"Token:   {settings.token_address}\n"
        f"Router:  {settings.router_address}\n"
        f"Wallets: {len(accounts)}   Buy chance: {settings.buy_probability:.0%}   "
        f"Slippage: {settings.slippage_tolerance:.0%}   Delay: {settings.min_delay_seconds:.0f}-{settings.max_delay_seconds:.0f}s"
    )
    return Panel(body, title="🎲 Random Swap Bot", style="white on blue")


def generate_session_table(stats: SessionStats, accounts):
    """Per-wallet tally for the session so far. Kept in memory only."""
    table = Table(title=f"📊 Session after {stats.cycles} cycle(s)")
    table.add_column("Wallet", style="magenta")
    table.add_column("Address", style="dim")
    table.add_column("Buys", justify="right")
    table.add_column("Sells", justify="right")
    table.add_column("OK", justify="right", style="green")
    table.add_column("Failures", style="red")

    for account in accounts:
        s = stats.accounts.get(account.label)
        if s is None:
            table.add_row(account.label, account.address, "0", "0", "0", "-")
            continue
        failures = ", ".join(f"{k}:{v}" for k, v in sorted(s.failures.items()))
        table.add_row(account.label, account.address, str(s.buys), str(s.sells), str(s.successes), failures or "-")

    table.caption = f"Total: {stats.total_successes}/{stats.total_attempts} succeeded"
    return table

# --- MAIN CONTROLLER ---

class SwapBot:
    def __init__(self, settings, accounts, console: Console = None):
        self.settings = settings
        self.accounts = accounts
        self.console = console or Console()
        self.logger = setup_console_logger("SwapBot", settings.log_level)

        self.gateway = ChainGateway(settings, self.logger)
        self.executor = TradeExecutor(self.gateway, self.logger, settings)
        self.selector = TradeSelector(
            self.executor, self.logger,
            AmountLimits.from_settings(settings),
            buy_probability=settings.buy_probability,
        )
        self.scheduler = SchedulerLoop(
            accounts, self.selector, self.logger,
            min_delay=settings.min_delay_seconds,
            max_delay=settings.max_delay_seconds,
            on_cycle_complete=self._print_summary,
        )

    def _print_summary(self, stats: SessionStats):
        self.console.print(generate_session_table(stats, self.accounts))

    async def run(self, cycles=None) -> int:
        try:
            print("Initializing Diagnostic Checks...")
            if not await self.gateway.initialize():
                print("❌ Diagnostic Failed. Check RPC_URL / INFURA_PROJECT_ID.")
                return 1

            self.console.print(generate_startup_panel(self.settings, self.accounts))
            await self.scheduler.run(cycles)
            return 0
        finally:
            print("Shutting down resources...")
            await self.gateway.shutdown()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Randomized buy/sell trading across a pool of wallets.")
    parser.add_argument("--config", default="config.yaml", help="Path to the YAML config (default: config.yaml)")
    parser.add_argument("--cycles", type=int, default=None, help="Stop after N full passes over the wallets (default: run forever)")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        settings = load_settings(args.config)
        accounts = load_accounts(settings.private_keys)
    except ConfigurationError as e:
        print(f"❌ Configuration error: {e}", file=sys.stderr)
        return 1

    if settings.interactive:
        accounts = startup_selection(accounts)

    bot = SwapBot(settings, accounts)
    try:
        import uvloop
        asyncio.set_event_loop_policy(uvloop.EventLoopPolicy())
    except ImportError:
        pass

    try:
        return asyncio.run(bot.run(args.cycles))
    except FatalControlError as e:
        print(f"💀 Fatal error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\n🛑 Bot Stopped by User.")
        return 0


if __name__ == "__main__":
    sys.exit(main())
