# swapbot/config.py
import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional

import yaml
from dotenv import load_dotenv
from web3 import Web3

from .errors import ConfigurationError

# Uniswap V2 router and WETH on Ethereum mainnet
DEFAULT_ROUTER_ADDRESS = "0x7a250d5630B4cF539739dF2C5dAcb4c659F2488D"
DEFAULT_BASE_CURRENCY_ADDRESS = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
DEFAULT_RPC_URL = "https://{network}.infura.io/v3/{project_id}"


@dataclass
class Settings:
    """
    Everything the trading core needs, resolved before the scheduler starts.
    Non-secret values come from config.yaml, secrets from the environment (.env).
    """
    network: str
    rpc_url: str
    router_address: str
    base_currency_address: str
    token_address: str
    private_keys: List[str] = field(repr=False)
    token_decimals: int = 18
    slippage_tolerance: Decimal = Decimal("0.05")
    deadline_seconds: int = 600
    gas_limit: int = 300000
    buy_probability: float = 0.7
    max_buy_amount: Decimal = Decimal("0.01")
    max_sell_amount: Decimal = Decimal("10")
    min_delay_seconds: float = 30.0
    max_delay_seconds: float = 90.0
    unlimited_approval: bool = False
    dry_run: bool = False
    interactive: bool = False
    log_level: str = "INFO"


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = raw.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"Section '{name}' must be a mapping")
    return value


def _decimal(value: Any, name: str) -> Decimal:
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ConfigurationError(f"'{name}' is not a number: {value!r}") from e


def _address(value: Optional[str], name: str) -> str:
    if not value or not value.strip():
        raise ConfigurationError(f"{name} is not set")
    value = value.strip()
    if not Web3.is_address(value):
        raise ConfigurationError(f"{name} is not a valid address: {value}")
    return Web3.to_checksum_address(value)


def read_config_file(path: str) -> Dict[str, Any]:
    if not path or not os.path.exists(path):
        return {}
    with open(path, "r") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{path} must contain a mapping at the top level")
    return raw


def resolve_rpc_url(template: str, network: str, env: Mapping[str, str]) -> str:
    explicit = (env.get("RPC_URL") or "").strip()
    if explicit:
        return explicit
    project_id = (env.get("INFURA_PROJECT_ID") or "").strip()
    if "{project_id}" in template and not project_id:
        raise ConfigurationError("Neither RPC_URL nor INFURA_PROJECT_ID is set")
    return template.format(network=network, project_id=project_id)


def load_settings(path: str = "config.yaml", env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Builds Settings from the YAML file and the environment.
    Raises ConfigurationError for anything that would make every trade fail.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    raw = read_config_file(path)
    system = _section(raw, "system")
    chain = _section(raw, "chain")
    trading = _section(raw, "trading")
    schedule = _section(raw, "schedule")

    network = (env.get("NETWORK") or system.get("network") or "mainnet").strip()
    rpc_url = resolve_rpc_url(chain.get("rpc_url", DEFAULT_RPC_URL), network, env)

    keys = [k.strip() for k in (env.get("PRIVATE_KEYS") or "").split(",") if k.strip()]
    if not keys:
        raise ConfigurationError("PRIVATE_KEYS is empty; at least one account key is required")

    settings = Settings(
        network=network,
        rpc_url=rpc_url,
        router_address=_address(chain.get("router_address", DEFAULT_ROUTER_ADDRESS), "router_address"),
        base_currency_address=_address(chain.get("base_currency_address", DEFAULT_BASE_CURRENCY_ADDRESS), "base_currency_address"),
        token_address=_address(env.get("TOKEN_ADDRESS"), "TOKEN_ADDRESS"),
        private_keys=keys,
        token_decimals=int(chain.get("token_decimals", 18)),
        slippage_tolerance=_decimal(trading.get("slippage_tolerance", "0.05"), "slippage_tolerance"),
        deadline_seconds=int(trading.get("deadline_seconds", 600)),
        gas_limit=int(trading.get("gas_limit", 300000)),
        buy_probability=float(trading.get("buy_probability", 0.7)),
        max_buy_amount=_decimal(trading.get("max_buy_amount", "0.01"), "max_buy_amount"),
        max_sell_amount=_decimal(trading.get("max_sell_amount", "10"), "max_sell_amount"),
        min_delay_seconds=float(schedule.get("min_delay_seconds", 30)),
        max_delay_seconds=float(schedule.get("max_delay_seconds", 90)),
        unlimited_approval=bool(trading.get("unlimited_approval", False)),
        dry_run=bool(system.get("dry_run", False)),
        interactive=bool(system.get("interactive", False)),
        log_level=str(system.get("log_level", "INFO")),
    )
    validate_settings(settings)
    return settings


def validate_settings(s: Settings):
    if not (Decimal(0) <= s.slippage_tolerance < Decimal(1)):
        raise ConfigurationError(f"slippage_tolerance must be in [0, 1), got {s.slippage_tolerance}")
    if not (0.0 <= s.buy_probability <= 1.0):
        raise ConfigurationError(f"buy_probability must be in [0, 1], got {s.buy_probability}")
    if s.max_buy_amount <= 0 or s.max_sell_amount <= 0:
        raise ConfigurationError("max_buy_amount and max_sell_amount must be positive")
    if s.min_delay_seconds < 0 or s.min_delay_seconds > s.max_delay_seconds:
        raise ConfigurationError("Delay window must satisfy 0 <= min_delay_seconds <= max_delay_seconds")
    if s.deadline_seconds <= 0 or s.gas_limit <= 0:
        raise ConfigurationError("deadline_seconds and gas_limit must be positive")
    if s.token_decimals < 0:
        raise ConfigurationError("token_decimals must not be negative")
