"""
Blockchain Interaction Package
Handles contract builds, code uploads, instantiation and confirmation polling
"""

from .chain_client import ChainClient, ChainError
from .confirmation import ConfirmationPoller, ConfirmationTimeout
from .contract_builder import ContractBuilder, BuildError
from .deployer import Deployer
from .signer import Signer

__all__ = [
    'ChainClient',
    'ChainError',
    'ConfirmationPoller',
    'ConfirmationTimeout',
    'ContractBuilder',
    'BuildError',
    'Deployer',
    'Signer'
]
