# swapbot/chain_gateway.py
import asyncio
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

import aiohttp
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.exceptions import ProviderConnectionError, TimeExhausted, Web3Exception

from .errors import GatewayUnavailable
from .models import Account

ROUTER_ABI = [
    {
        "name": "swapExactETHForTokens",
        "type": "function",
        "stateMutability": "payable",
        "inputs": [
            {"name": "amountOutMin", "type": "uint256"},
            {"name": "path", "type": "address[]"},
            {"name": "to", "type": "address"},
            {"name": "deadline", "type": "uint256"},
        ],
        "outputs": [{"name": "amounts", "type": "uint256[]"}],
    },
    {
        "name": "swapExactTokensForETH",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "amountIn", "type": "uint256"},
            {"name": "amountOutMin", "type": "uint256"},
            {"name": "path", "type": "address[]"},
            {"name": "to", "type": "address"},
            {"name": "deadline", "type": "uint256"},
        ],
        "outputs": [{"name": "amounts", "type": "uint256[]"}],
    },
    {
        "name": "getAmountsOut",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "amountIn", "type": "uint256"},
            {"name": "path", "type": "address[]"},
        ],
        "outputs": [{"name": "amounts", "type": "uint256[]"}],
    },
]

ERC20_ABI = [
    {
        "name": "approve",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "spender", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "name": "allowance",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "spender", "type": "address"},
        ],
        "outputs": [{"name": "", "type": "uint256"}],
    },
]

# Failures of the RPC transport itself, as opposed to the contract saying no
TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, OSError, ProviderConnectionError, TimeExhausted)


class PendingTransaction:
    """A submitted transaction. `wait()` suspends until it is mined."""

    def __init__(self, tx_hash: str, gateway: "ChainGateway"):
        self.hash = tx_hash
        self._gateway = gateway

    async def wait(self) -> Dict[str, Any]:
        return await self._gateway.wait_for_receipt(self.hash)

    def __repr__(self):
        return f"PendingTransaction({self.hash})"


class ChainGateway:
    """
    Manages the RPC connection to the chain.
    Responsible for the startup diagnostic, read-only contract calls, and
    signing + broadcasting transactions for an Account.
    Contract reverts (ContractLogicError) are left to the caller to classify.
    """
    def __init__(self, settings, logger, w3: Optional[AsyncWeb3] = None, request_timeout: float = 30.0):
        self.settings = settings
        self.logger = logger
        self.w3 = w3 or AsyncWeb3(AsyncHTTPProvider(
            settings.rpc_url,
            request_kwargs={"timeout": aiohttp.ClientTimeout(total=request_timeout)},
        ))
        # Receipts are not awaited past the on-chain deadline of the swap
        self.receipt_timeout = float(settings.deadline_seconds)
        self.router = self.w3.eth.contract(address=settings.router_address, abi=ROUTER_ABI)
        self.token = self.w3.eth.contract(address=settings.token_address, abi=ERC20_ABI)

    @asynccontextmanager
    async def _guard(self, action: str):
        try:
            yield
        except TRANSPORT_ERRORS as e:
            raise GatewayUnavailable(f"{action} failed: {type(e).__name__}: {e}") from e

    async def initialize(self) -> bool:
        """
        Connectivity test: node reachable, chain id readable, router deployed.
        Returns False instead of raising so the caller can abort startup.
        """
        self.logger.info(f"📡 TESTING RPC CONNECTION ({self.settings.network})...")
        try:
            if not await self.w3.is_connected():
                self.logger.critical(f"   ❌ {self.settings.network.upper():<10} | RPC endpoint unreachable.")
                return False

            chain_id = await self.w3.eth.chain_id
            block = await self.w3.eth.block_number
            code = await self.w3.eth.get_code(self.settings.router_address)
            if not code:
                self.logger.critical(f"   ❌ {self.settings.network.upper():<10} | No contract at router {self.settings.router_address}.")
                return False

            self.logger.info(f"   ✅ {self.settings.network.upper():<10} | chain_id={chain_id} | block={block} | Router: OK")
            return True

        except TRANSPORT_ERRORS as e:
            self.logger.error(f"   ❌ {self.settings.network.upper():<10} | TIMEOUT/NETWORK: {e}")
            return False

        except Web3Exception as e:
            self.logger.critical(f"   ❌ {self.settings.network.upper():<10} | RPC ERROR: {e}")
            return False

        except Exception as e:
            self.logger.critical(f"   ❌ {self.settings.network.upper():<10} | UNKNOWN ERROR: {type(e).__name__}: {e}")
            return False

    # --- READS ---

    async def get_amounts_out(self, amount_in: int, path: List[str]) -> List[int]:
        async with self._guard("getAmountsOut"):
            amounts = await self.router.functions.getAmountsOut(amount_in, path).call()
        return [int(a) for a in amounts]

    async def allowance(self, owner: str, spender: str) -> int:
        async with self._guard("allowance"):
            return int(await self.token.functions.allowance(owner, spender).call())

    # --- WRITES ---

    async def approve(self, account: Account, spender: str, amount: int) -> PendingTransaction:
        return await self._send(account, self.token.functions.approve(spender, amount), {})

    async def swap_exact_eth_for_tokens(self, account: Account, amount_out_min: int, path: List[str],
                                        deadline: int, value: int, gas_limit: int) -> PendingTransaction:
        fn = self.router.functions.swapExactETHForTokens(amount_out_min, path, account.address, deadline)
        return await self._send(account, fn, {"value": value, "gas": gas_limit})

    async def swap_exact_tokens_for_eth(self, account: Account, amount_in: int, amount_out_min: int,
                                        path: List[str], deadline: int, gas_limit: int) -> PendingTransaction:
        fn = self.router.functions.swapExactTokensForETH(amount_in, amount_out_min, path, account.address, deadline)
        return await self._send(account, fn, {"gas": gas_limit})

    async def _send(self, account: Account, fn, params: Dict[str, Any]) -> PendingTransaction:
        async with self._guard(f"send {fn.fn_name}"):
            nonce = await self.w3.eth.get_transaction_count(account.address, "pending")
            tx = await fn.build_transaction({"from": account.address, "nonce": nonce, **params})
            signed = account.signer.sign_transaction(tx)
            tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        return PendingTransaction(self.w3.to_hex(tx_hash), self)

    async def wait_for_receipt(self, tx_hash: str) -> Dict[str, Any]:
        async with self._guard(f"receipt {tx_hash}"):
            receipt = await self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.receipt_timeout)
        return dict(receipt)

    async def shutdown(self):
        """
        Gracefully closes the provider's HTTP session.
        """
        await self.w3.provider.disconnect()
