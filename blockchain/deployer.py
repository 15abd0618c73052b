"""
Deployer
Build, optimize, store and instantiate contracts, recording results in refs
"""

from typing import Any, Dict, Optional
from loguru import logger

from utils.refs import Refs
from .chain_client import ChainClient, ChainError, event_attribute
from .confirmation import ConfirmationPoller
from .contract_builder import ContractBuilder


# Minimum seconds between an upload and the next dependent chain call
SETTLE_DELAY = 3.0


class Deployer:
    """
    Deployment operations exposed to tasks

    Every operation either completes or raises; nothing is retried.
    """

    def __init__(
        self,
        builder: ContractBuilder,
        client: ChainClient,
        refs: Refs,
        poller: ConfirmationPoller
    ):
        """
        Initialize Deployer

        Args:
            builder: Contract builder (cargo + optimizer)
            client: Chain client (terrad + LCD)
            refs: Refs store updated on store/instantiate
            poller: Poller used for tx inclusion and code visibility
        """
        self.builder = builder
        self.client = client
        self.refs = refs
        self.poller = poller

    async def build_contract(self, name: str):
        await self.builder.build(name)

    async def optimize_contract(self, name: str) -> str:
        return await self.builder.optimize(name)

    async def store_code(self, name: str) -> int:
        """
        Upload optimized contract code

        Args:
            name: Contract name

        Returns:
            Code id
        """
        wasm_path = self.builder.artifact_path(name)

        logger.info(f"Storing {name} from {wasm_path}...")
        tx_hash = await self.client.store_code(wasm_path)
        tx = await self._wait_for_tx(tx_hash, f"store {name}")

        code_id = event_attribute(tx, 'store_code', 'code_id')
        if code_id is None:
            raise ChainError(f"store {name}: no code_id in tx {tx_hash}")

        code_id = int(code_id)
        self.refs.set_code_id(name, code_id)

        logger.success(f"Stored {name}: code id {code_id}")
        return code_id

    async def wait_for_code(self, code_id: Any) -> Dict:
        """Block until stored code is queryable on chain, never sooner than SETTLE_DELAY"""
        async with self.client.lcd_session():
            return await self.poller.wait(
                lambda: self.client.get_code(code_id),
                f"code {code_id}",
                min_delay=SETTLE_DELAY
            )

    async def instantiate(
        self,
        name: str,
        msg: Dict,
        admin: Optional[str] = None,
        label: Optional[str] = None
    ) -> Dict:
        """
        Instantiate a stored contract

        Args:
            name: Contract name (code id is taken from refs)
            msg: Instantiate message, sent as-is
            admin: Admin address
            label: Contract label (defaults to name)

        Returns:
            Dict with code_id, address and tx_hash
        """
        code_id = self.refs.get_code_id(name)
        if code_id is None:
            raise ValueError(f"No stored code id for {name} on {self.refs.network}")

        logger.info(f"Instantiating {name} from code {code_id} (admin: {admin})")
        tx_hash = await self.client.instantiate(code_id, msg, label or name, admin)
        tx = await self._wait_for_tx(tx_hash, f"instantiate {name}")

        address = event_attribute(tx, 'instantiate', '_contract_address')
        if address is None:
            raise ChainError(f"instantiate {name}: no contract address in tx {tx_hash}")

        self.refs.set_address(name, address)

        logger.success(f"Instantiated {name} at {address}")
        return {'code_id': code_id, 'address': address, 'tx_hash': tx_hash}

    async def _wait_for_tx(self, tx_hash: str, action: str) -> Dict:
        """Wait for inclusion and fail on a non-zero deliver-tx code"""
        async with self.client.lcd_session():
            tx = await self.poller.wait(lambda: self.client.get_tx(tx_hash), f"tx {tx_hash}")

        if tx.get('code', 0) != 0:
            raise ChainError(f"{action} failed in tx {tx_hash} (code {tx['code']}): {tx.get('raw_log', '')}")

        return tx
