"""
Chain Client
Broadcasts wasm transactions through the terrad CLI and reads chain state from the LCD
"""

import json
import asyncio
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional
import aiohttp
from loguru import logger


class ChainError(Exception):
    """Raised when the CLI or LCD reports a failed transaction or request"""


class ChainClient:
    """
    Thin client over terrad (signing, broadcast) and the LCD REST API (queries)

    Signing keys stay in the terrad keyring; this client only passes key names.
    """

    def __init__(self, network_config: Dict, cli_config: Dict, key_name: str):
        """
        Initialize Chain Client

        Args:
            network_config: chain_id, lcd, rpc, gas_prices
            cli_config: binary, keyring_backend, gas_adjustment
            key_name: Keyring key used with --from
        """
        self.chain_id = network_config['chain_id']
        self.lcd_url = network_config['lcd'].rstrip('/')
        self.rpc_url = network_config['rpc']
        self.gas_prices = network_config.get('gas_prices', '0.15uluna')

        self.binary = cli_config.get('binary', 'terrad')
        self.keyring_backend = cli_config.get('keyring_backend', 'test')
        self.gas_adjustment = cli_config.get('gas_adjustment', 1.3)
        self.request_timeout = cli_config.get('request_timeout', 10)

        self.key_name = key_name
        self._session = None

        logger.info(f"Chain client ready for {self.chain_id} ({self.lcd_url})")

    def _tx_flags(self) -> List[str]:
        """Flags shared by every broadcast"""
        return [
            "--from", self.key_name,
            "--chain-id", self.chain_id,
            "--node", self.rpc_url,
            "--gas", "auto",
            "--gas-adjustment", str(self.gas_adjustment),
            "--gas-prices", self.gas_prices,
            "--keyring-backend", self.keyring_backend,
            "--broadcast-mode", "sync",
            "--output", "json",
            "-y"
        ]

    async def store_code(self, wasm_path: str) -> str:
        """
        Upload wasm code

        Args:
            wasm_path: Path to optimized wasm

        Returns:
            Transaction hash
        """
        response = await self._run_cli(
            ["tx", "wasm", "store", wasm_path] + self._tx_flags()
        )
        return self._tx_hash(response, f"store {wasm_path}")

    async def instantiate(
        self,
        code_id: Any,
        msg: Dict,
        label: str,
        admin: Optional[str] = None
    ) -> str:
        """
        Instantiate a contract from stored code

        Args:
            code_id: Stored code id
            msg: Instantiate message
            label: Contract label
            admin: Admin address (None = no admin)

        Returns:
            Transaction hash
        """
        args = [
            "tx", "wasm", "instantiate", str(code_id), json.dumps(msg),
            "--label", label
        ]
        args += ["--admin", admin] if admin else ["--no-admin"]

        response = await self._run_cli(args + self._tx_flags())
        return self._tx_hash(response, f"instantiate {label}")

    async def key_address(self, key_name: str) -> str:
        """Resolve keyring key to its account address"""
        output = await self._run_cli(
            ["keys", "show", key_name, "-a", "--keyring-backend", self.keyring_backend],
            parse_json=False
        )
        return output.strip()

    async def get_tx(self, tx_hash: str) -> Optional[Dict]:
        """
        Look up an included transaction

        Returns:
            tx_response dict, or None while the tx is not indexed yet
        """
        data = await self._lcd_get(f"/cosmos/tx/v1beta1/txs/{tx_hash}")
        if data is None:
            return None
        return data.get('tx_response')

    async def get_code(self, code_id: Any) -> Optional[Dict]:
        """
        Look up stored code info

        Returns:
            code_info dict, or None while the code is not visible
        """
        data = await self._lcd_get(f"/cosmwasm/wasm/v1/code/{code_id}")
        if data is None:
            return None
        return data.get('code_info', data)

    @asynccontextmanager
    async def lcd_session(self):
        """
        Share one aiohttp session across the LCD queries made inside the block

        Nested use reuses the outer session.
        """
        if self._session is not None:
            yield self._session
            return

        timeout = aiohttp.ClientTimeout(total=self.request_timeout)

        async with aiohttp.ClientSession(timeout=timeout) as session:
            self._session = session
            try:
                yield session
            finally:
                self._session = None

    async def _lcd_get(self, path: str) -> Optional[Dict]:
        """GET from LCD; None for not-found responses"""
        url = f"{self.lcd_url}{path}"

        async with self.lcd_session() as session:
            async with session.get(url) as response:
                if response.status == 200:
                    return await response.json()

                body = await response.text()

                if response.status == 404 or 'not found' in body.lower():
                    return None

                raise ChainError(f"LCD {url} returned {response.status}: {body}")

    async def _run_cli(self, args: List[str], parse_json: bool = True) -> Any:
        """Run terrad, raising ChainError on non-zero exit"""
        cmd = [self.binary] + args
        logger.debug(f"  > {' '.join(cmd)}")

        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE
        )
        stdout, stderr = await process.communicate()

        if process.returncode != 0:
            raise ChainError(
                f"{self.binary} {args[0]} {args[1]} failed ({process.returncode}): "
                f"{stderr.decode(errors='replace').strip()}"
            )

        output = stdout.decode(errors='replace')
        return json.loads(output) if parse_json else output

    @staticmethod
    def _tx_hash(response: Dict, action: str) -> str:
        """Extract tx hash from a sync broadcast, failing on check-tx errors"""
        if response.get('code', 0) != 0:
            raise ChainError(f"{action} rejected (code {response['code']}): {response.get('raw_log', '')}")

        tx_hash = response.get('txhash')
        if not tx_hash:
            raise ChainError(f"{action} returned no txhash")

        logger.info(f"{action}: tx {tx_hash}")
        return tx_hash


def event_attribute(tx_response: Dict, event_type: str, key: str) -> Optional[str]:
    """
    Find an event attribute in a tx response

    Looks at the top-level events list first, then per-message logs.
    """
    event_lists = [tx_response.get('events') or []]
    event_lists += [log.get('events') or [] for log in tx_response.get('logs') or []]

    for events in event_lists:
        for event in events:
            if event.get('type') != event_type:
                continue
            for attribute in event.get('attributes', []):
                if attribute.get('key') == key:
                    return attribute.get('value')

    return None
