"""
Executor exceptions.

Only the key vault lets its errors reach the scheduler; every other component turns
its own failures into a safe default (empty list, HOLD, skipped trade, failed outcome).
"""


class ExecutorError(Exception):
    """Base class for executor errors."""


class ConfigurationError(ExecutorError):
    """Custody cannot operate: master secret missing or too short."""


class IntegrityError(ExecutorError):
    """Decrypted key does not belong to the expected wallet."""


class KeyNotFoundError(ExecutorError):
    """Key record missing or undecryptable. Deliberately vague."""

    def __init__(self, message: str = "Agent keypair not found or decryption failed"):
        super().__init__(message)


class TransportError(ExecutorError):
    """A directory, model, aggregator or RPC call could not be completed."""


class DecisionValidationError(ExecutorError):
    """Model output is malformed or violates trading policy."""


class SubmissionError(ExecutorError):
    """Signing, broadcast or confirmation of a transaction failed."""
