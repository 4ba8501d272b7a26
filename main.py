#!/usr/bin/env python3
"""
Main entry point for the agent trading executor.

Loads configuration, builds the loop controller and runs agent cycles until
stopped. Exits non-zero on any startup configuration error.
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

from agent_executor.config import Config
from agent_executor.errors import ConfigurationError
from agent_executor.loop_controller import LoopController


class JSONFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno
        }
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def setup_logging(verbose: bool = False, json_logs: bool = False) -> None:
    """
    Configure logging for the application.

    Args:
        verbose: If True, set log level to DEBUG, otherwise INFO
        json_logs: If True, enable JSON structured logging
    """
    log_level = logging.DEBUG if verbose else logging.INFO

    Path("logs").mkdir(exist_ok=True)

    if json_logs:
        formatter = JSONFormatter()
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        date_format = "%Y-%m-%d %H:%M:%S"
        formatter = logging.Formatter(log_format, date_format)

    handlers = [
        logging.StreamHandler(sys.stdout),
        logging.FileHandler("logs/executor.log", mode="a")
    ]

    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(
        level=log_level,
        handlers=handlers
    )

    if json_logs:
        json_handler = logging.FileHandler("logs/executor.json", mode="a")
        json_handler.setFormatter(formatter)
        logging.root.addHandler(json_handler)

    # Request URLs carry wallet addresses; keep third-party HTTP loggers quiet
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("botocore").setLevel(logging.WARNING)


def parse_arguments(argv=None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description="Agent trading executor - periodic LLM-driven swaps for registered agents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                    # Run with default .env file
  python main.py --env .env.devnet  # Run with custom env file
  python main.py --once --verbose   # Single cycle with debug logging

Environment Variables:
  KEY_BACKEND (local|kms), ENCRYPTION_MASTER_KEY, DECISION_API_KEY,
  RPC_ENDPOINT, BACKEND_API_URL, EXECUTION_INTERVAL_MINUTES.
        """
    )

    parser.add_argument(
        "--env",
        type=str,
        default=".env",
        help="Path to environment file (default: .env)"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging"
    )

    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Enable JSON structured logging (outputs to logs/executor.json)"
    )

    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single cycle and exit"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="Agent Executor v1.0.0"
    )

    return parser.parse_args(argv)


def main(argv=None) -> int:
    """
    Main entry point for the executor.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    args = parse_arguments(argv)

    setup_logging(verbose=args.verbose, json_logs=args.json_logs)
    logger = logging.getLogger(__name__)

    logger.info("=" * 80)
    logger.info("AGENT TRADING EXECUTOR")
    logger.info("=" * 80)

    # Load configuration
    try:
        logger.info(f"Loading configuration from: {args.env}")

        if args.env != ".env":
            if not Path(args.env).exists():
                logger.error(f"Environment file not found: {args.env}")
                return 1
            load_dotenv(args.env, override=True)

        config = Config.from_env()
        logger.info("[OK] Configuration loaded successfully")
        logger.info(f"RPC endpoint: {config.rpc_endpoint}")
        logger.info(f"Execution interval: every {config.execution_interval_minutes} minute(s)")
        logger.info(f"Key backend: {config.key_backend}")

    except ValueError as e:
        logger.error(f"[ERROR] Configuration error: {e}")
        logger.error("Please check your .env file and ensure all required variables are set.")
        return 1

    # Initialize loop controller
    try:
        logger.info("Initializing loop controller...")
        controller = LoopController(config)
        logger.info("[OK] Loop controller initialized")

    except ConfigurationError as e:
        logger.error(f"[ERROR] Custody configuration error: {e}")
        return 1
    except Exception as e:
        logger.error(f"[ERROR] Failed to initialize loop controller: {e}", exc_info=True)
        return 1

    controller.register_signal_handlers()

    if not controller.startup():
        logger.error("[ERROR] Startup checks failed")
        return 1

    try:
        if args.once:
            controller.run_once()
        else:
            logger.info("Starting execution loop (first cycle runs now)...")
            logger.info("Press Ctrl+C to stop gracefully")
            logger.info("=" * 80)
            controller.run()

        logger.info("=" * 80)
        logger.info("Executor stopped successfully")
        logger.info("=" * 80)
        return 0

    except ConfigurationError as e:
        logger.error(f"[ERROR] Custody configuration error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("\nKeyboard interrupt received")
        controller.shutdown()
        return 0
    except Exception as e:
        logger.error(f"[ERROR] Fatal error in main loop: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
