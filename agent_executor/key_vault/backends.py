"""Key backends: where encrypted agent keys live and how they are unwrapped."""

import base64
import logging
import os
from abc import ABC, abstractmethod
from typing import Optional

from solders.pubkey import Pubkey

from agent_executor.config import MIN_MASTER_KEY_LENGTH
from agent_executor.errors import ConfigurationError, KeyNotFoundError
from agent_executor.key_vault.crypto import decrypt_data, encrypt_data

logger = logging.getLogger(__name__)

SELF_TEST_PLAINTEXT = b"test-data-12345"


class FileKeyStore:
    """Read-only store of one record file per wallet address."""

    def __init__(self, keys_dir: str, suffix: str):
        self.keys_dir = keys_dir
        self.suffix = suffix

    def get(self, wallet_address: str) -> Optional[str]:
        """
        Read the record for a wallet.

        Returns:
            Record contents, or None if the address is invalid or no record exists
        """
        # Only well-formed addresses become file names
        try:
            Pubkey.from_string(wallet_address)
        except ValueError:
            return None

        path = os.path.join(self.keys_dir, f"{wallet_address}{self.suffix}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read().strip()
        except OSError:
            return None


class KeyBackend(ABC):
    """Source of decrypted signing-key bytes for an agent wallet."""

    name = "abstract"

    @abstractmethod
    def load_secret_key(self, wallet_address: str) -> bytes:
        """
        Return the decrypted secret key bytes for a wallet.

        Raises:
            ConfigurationError: If the backend is not usable at all
            KeyNotFoundError: For any missing or undecryptable record
        """
        pass

    def self_test(self) -> bool:
        """Check that the backend can operate. Backends without a local check pass."""
        return True


def require_master_key(master_key: Optional[str]) -> str:
    """
    Validate the master secret.

    Raises:
        ConfigurationError: If it is missing or shorter than the minimum length
    """
    if not master_key:
        raise ConfigurationError("ENCRYPTION_MASTER_KEY not set in environment. Keys cannot be decrypted.")
    if len(master_key) < MIN_MASTER_KEY_LENGTH:
        raise ConfigurationError(
            f"ENCRYPTION_MASTER_KEY must be at least {MIN_MASTER_KEY_LENGTH} characters long"
        )
    return master_key


class LocalFileKeyBackend(KeyBackend):
    """AES-256-GCM records on local disk (<wallet>.enc), unlocked by the master secret."""

    name = "local"

    def __init__(self, keys_dir: str, master_key: Optional[str]):
        # Fails here, at construction, rather than at the first trade
        self._master_key = require_master_key(master_key)
        self.store = FileKeyStore(keys_dir, ".enc")

    def load_secret_key(self, wallet_address: str) -> bytes:
        record = self.store.get(wallet_address)
        if record is None:
            raise KeyNotFoundError()
        try:
            return decrypt_data(record, self._master_key)
        except Exception as e:
            raise KeyNotFoundError() from e

    def self_test(self) -> bool:
        try:
            encrypted = encrypt_data(SELF_TEST_PLAINTEXT, self._master_key)
            return decrypt_data(encrypted, self._master_key) == SELF_TEST_PLAINTEXT
        except Exception as e:
            logger.error(f"[ENCRYPTION-VALIDATION] Setup validation failed: {type(e).__name__}")
            return False


class KmsKeyBackend(KeyBackend):
    """Records wrapped by AWS KMS (<wallet>.kms), unwrapped with a remote Decrypt call."""

    name = "kms"

    def __init__(self, keys_dir: str, region: str, key_id: str, kms_client=None):
        """
        Initialize the remote managed-key backend.

        Args:
            keys_dir: Directory holding base64 KMS ciphertext blobs
            region: AWS region of the key
            key_id: KMS key id or ARN
            kms_client: Optional pre-built boto3 KMS client
        """
        if not region or not key_id:
            raise ConfigurationError("AWS_REGION and AWS_KMS_KEY_ID are required for the KMS key backend")
        if kms_client is None:
            import boto3
            kms_client = boto3.client("kms", region_name=region)
        self.kms_client = kms_client
        self.key_id = key_id
        self.store = FileKeyStore(keys_dir, ".kms")

    def load_secret_key(self, wallet_address: str) -> bytes:
        record = self.store.get(wallet_address)
        if record is None:
            raise KeyNotFoundError("Agent keypair not found or KMS decryption failed")
        try:
            response = self.kms_client.decrypt(
                CiphertextBlob=base64.b64decode(record, validate=True),
                KeyId=self.key_id,
            )
            return bytes(response["Plaintext"])
        except Exception as e:
            raise KeyNotFoundError("Agent keypair not found or KMS decryption failed") from e


def create_key_backend(config) -> KeyBackend:
    """
    Build the backend selected by KEY_BACKEND.

    Raises:
        ConfigurationError: If the selection is unknown or its settings are invalid
    """
    if config.key_backend == "local":
        return LocalFileKeyBackend(config.keys_dir, config.encryption_master_key)
    if config.key_backend == "kms":
        return KmsKeyBackend(config.keys_dir, config.aws_region, config.aws_kms_key_id)
    raise ConfigurationError(f"Unknown key backend: {config.key_backend!r}")
