"""Transient access to agent signing keys."""

import logging

from solders.keypair import Keypair

from agent_executor.errors import ConfigurationError, IntegrityError, KeyNotFoundError
from agent_executor.key_vault.backends import KeyBackend
from agent_executor.logger import mask_address

logger = logging.getLogger(__name__)


class KeyVault:
    """Loads and verifies agent keypairs. Never logs or exposes key material."""

    def __init__(self, backend: KeyBackend):
        self.backend = backend

    def get_agent_keypair(self, wallet_address: str) -> Keypair:
        """
        Decrypt the signing keypair for an agent wallet.

        Args:
            wallet_address: Expected public key (base58) of the keypair

        Returns:
            Keypair whose public key equals wallet_address

        Raises:
            ConfigurationError: If custody is not configured
            IntegrityError: If the decrypted key belongs to another wallet
            KeyNotFoundError: For any other failure
        """
        masked = mask_address(wallet_address)
        try:
            secret_key = self.backend.load_secret_key(wallet_address)
            keypair = Keypair.from_bytes(secret_key)
        except ConfigurationError:
            logger.error(f"[KEY-ACCESS-ERROR] Encryption configuration error (wallet: {masked})")
            raise
        except Exception as e:
            logger.error(f"[KEY-ACCESS-ERROR] Failed to load agent keypair (wallet: {masked})")
            raise KeyNotFoundError() from e

        if str(keypair.pubkey()) != wallet_address:
            logger.error(f"[KEY-ACCESS-ERROR] Key verification failed (wallet: {masked})")
            raise IntegrityError("Key verification failed: public key mismatch")

        logger.info(f"[KEY-ACCESS] Agent keypair loaded successfully (wallet: {masked}, backend: {self.backend.name})")
        return keypair

    def validate_encryption_setup(self) -> bool:
        """Run the backend self-test (encrypt/decrypt round trip for local custody)."""
        return self.backend.self_test()
