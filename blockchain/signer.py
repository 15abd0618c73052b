"""
Signer
Identity the deployment signs with: a terrad keyring key and its account address
"""

from loguru import logger


class SignerKey:
    """Keyring key name plus resolved account address"""

    def __init__(self, name: str, acc_address: str):
        self.name = name
        self.acc_address = acc_address


class Signer:
    """
    Deployment signer

    Tasks read signer.key.acc_address (e.g. as contract admin).
    """

    def __init__(self, key_name: str, acc_address: str):
        self.key = SignerKey(key_name, acc_address)
        logger.info(f"Signer {key_name}: {acc_address}")

    @classmethod
    async def from_keyring(cls, client, key_name: str) -> 'Signer':
        """
        Build signer by resolving the key's address through the chain client

        Args:
            client: ChainClient
            key_name: Keyring key name
        """
        acc_address = await client.key_address(key_name)

        if not acc_address:
            raise ValueError(f"Key {key_name} has no address in keyring")

        return cls(key_name, acc_address)
