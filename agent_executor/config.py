"""Configuration module for the agent trading executor."""

import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv


DEFAULT_RPC_ENDPOINT = "https://api.devnet.solana.com"
DEFAULT_BACKEND_API_URL = "http://localhost:3001/api"
DEFAULT_JUPITER_API_URL = "https://quote-api.jup.ag/v6"
DEFAULT_DECISION_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
DEFAULT_DECISION_MODEL = "gemini-2.0-flash"

KEY_BACKENDS = ("local", "kms")
MIN_MASTER_KEY_LENGTH = 32


@dataclass
class Config:
    """Configuration for the executor loaded from environment variables."""

    # Network
    rpc_endpoint: str
    backend_api_url: str
    jupiter_api_url: str

    # Scheduling
    execution_interval_minutes: int

    # Decision backend
    decision_api_key: str
    decision_base_url: str
    decision_model: str
    decision_timeout_seconds: float

    # Custody
    key_backend: str  # "local" | "kms"
    keys_dir: str
    encryption_master_key: Optional[str]
    aws_region: Optional[str]
    aws_kms_key_id: Optional[str]

    # Trading guards
    min_trade_balance_sol: float

    # Output
    trade_log_file: str

    @property
    def execution_interval_seconds(self) -> int:
        return self.execution_interval_minutes * 60

    @classmethod
    def from_env(cls) -> "Config":
        """
        Load configuration from environment variables with validation.

        Returns:
            Config: Validated configuration object

        Raises:
            ValueError: If required fields are missing or invalid
        """
        # Load .env file if it exists
        load_dotenv()

        rpc_endpoint = os.getenv("RPC_ENDPOINT", DEFAULT_RPC_ENDPOINT)
        backend_api_url = os.getenv("BACKEND_API_URL", DEFAULT_BACKEND_API_URL).rstrip("/")
        jupiter_api_url = os.getenv("JUPITER_API_URL", DEFAULT_JUPITER_API_URL).rstrip("/")
        decision_api_key = os.getenv("DECISION_API_KEY") or os.getenv("GEMINI_API_KEY")
        decision_base_url = os.getenv("DECISION_BASE_URL", DEFAULT_DECISION_BASE_URL)
        decision_model = os.getenv("DECISION_MODEL", DEFAULT_DECISION_MODEL)
        key_backend = (os.getenv("KEY_BACKEND") or "").strip().lower()
        keys_dir = os.getenv("KEYS_DIR", ".keys")
        encryption_master_key = os.getenv("ENCRYPTION_MASTER_KEY")
        aws_region = os.getenv("AWS_REGION")
        aws_kms_key_id = os.getenv("AWS_KMS_KEY_ID")
        trade_log_file = os.getenv("TRADE_LOG_FILE", "logs/trade_log.jsonl")

        # Validate required fields
        required_fields = {
            "DECISION_API_KEY": decision_api_key,
            "KEY_BACKEND": key_backend,
        }

        missing_fields = [name for name, value in required_fields.items() if not value]
        if missing_fields:
            raise ValueError(f"Missing required environment variables: {', '.join(missing_fields)}")

        # The custody backend has no default: operators must pick one
        if key_backend not in KEY_BACKENDS:
            raise ValueError(f"KEY_BACKEND must be one of {', '.join(KEY_BACKENDS)}")

        if key_backend == "local":
            if not encryption_master_key:
                raise ValueError("ENCRYPTION_MASTER_KEY is required when KEY_BACKEND=local")
            if len(encryption_master_key) < MIN_MASTER_KEY_LENGTH:
                raise ValueError(
                    f"ENCRYPTION_MASTER_KEY must be at least {MIN_MASTER_KEY_LENGTH} characters long"
                )
        else:
            missing_kms = [
                name for name, value in {"AWS_REGION": aws_region, "AWS_KMS_KEY_ID": aws_kms_key_id}.items()
                if not value
            ]
            if missing_kms:
                raise ValueError(f"Missing required environment variables for KEY_BACKEND=kms: {', '.join(missing_kms)}")

        # Load numeric fields with defaults
        try:
            execution_interval_minutes = int(os.getenv("EXECUTION_INTERVAL_MINUTES", "5"))
        except ValueError:
            raise ValueError("EXECUTION_INTERVAL_MINUTES must be a valid integer")

        try:
            decision_timeout_seconds = float(os.getenv("DECISION_TIMEOUT_SECONDS", "30"))
        except ValueError:
            raise ValueError("DECISION_TIMEOUT_SECONDS must be a valid float")

        try:
            min_trade_balance_sol = float(os.getenv("MIN_TRADE_BALANCE_SOL", "0.01"))
        except ValueError:
            raise ValueError("MIN_TRADE_BALANCE_SOL must be a valid float")

        # Validate numeric ranges
        if execution_interval_minutes <= 0:
            raise ValueError("EXECUTION_INTERVAL_MINUTES must be greater than 0")

        if decision_timeout_seconds <= 0:
            raise ValueError("DECISION_TIMEOUT_SECONDS must be greater than 0")

        if min_trade_balance_sol < 0:
            raise ValueError("MIN_TRADE_BALANCE_SOL must be non-negative")

        return cls(
            rpc_endpoint=rpc_endpoint,
            backend_api_url=backend_api_url,
            jupiter_api_url=jupiter_api_url,
            execution_interval_minutes=execution_interval_minutes,
            decision_api_key=decision_api_key,
            decision_base_url=decision_base_url,
            decision_model=decision_model,
            decision_timeout_seconds=decision_timeout_seconds,
            key_backend=key_backend,
            keys_dir=keys_dir,
            encryption_master_key=encryption_master_key,
            aws_region=aws_region,
            aws_kms_key_id=aws_kms_key_id,
            min_trade_balance_sol=min_trade_balance_sol,
            trade_log_file=trade_log_file,
        )
