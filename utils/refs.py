"""
Contract Refs
Persisted record of deployed code ids and addresses, keyed by network and contract name
"""

import os
import json
import tempfile
from typing import Any, Dict, Optional
from loguru import logger


DEFAULT_REFS_PATH = "refs.terrarium.json"


class Refs:
    """
    JSON-backed refs store

    Layout:
        {
            "testnet": {
                "warp-controller": {"codeId": 1234, "address": "terra1..."}
            }
        }
    """

    def __init__(self, path: str = DEFAULT_REFS_PATH, network: str = 'localterra'):
        """
        Initialize refs store

        Args:
            path: Path to refs JSON file
            network: Network whose entries this instance reads and writes
        """
        self.path = path
        self.network = network
        self.refs = self._load()

        logger.info(f"Refs loaded from {path} ({len(self._network_refs())} contracts on {network})")

    def _load(self) -> Dict:
        """Load refs file, empty if it does not exist yet"""
        if not os.path.exists(self.path):
            return {}

        with open(self.path, 'r') as f:
            return json.load(f)

    def _network_refs(self) -> Dict:
        return self.refs.setdefault(self.network, {})

    def get_contract(self, name: str) -> Dict:
        """Get the full ref entry for a contract (empty if unknown)"""
        return dict(self._network_refs().get(name, {}))

    def get_code_id(self, name: str) -> Optional[Any]:
        return self._network_refs().get(name, {}).get('codeId')

    def get_address(self, name: str) -> Optional[str]:
        return self._network_refs().get(name, {}).get('address')

    def set_code_id(self, name: str, code_id: Any):
        """Record stored code id for a contract"""
        self._network_refs().setdefault(name, {})['codeId'] = code_id
        logger.debug(f"Ref {self.network}/{name}.codeId = {code_id}")

    def set_address(self, name: str, address: str):
        """Record instantiated address for a contract"""
        self._network_refs().setdefault(name, {})['address'] = address
        logger.debug(f"Ref {self.network}/{name}.address = {address}")

    def save_refs(self):
        """Write all refs (every network) back to disk, replacing the file atomically"""
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".refs-", suffix=".tmp")
        try:
            with os.fdopen(fd, 'w') as f:
                json.dump(self.refs, f, indent=2)
                f.write('\n')
            os.replace(tmp_path, self.path)
        except BaseException:
            os.unlink(tmp_path)
            raise

        logger.success(f"Refs saved to {self.path}")
