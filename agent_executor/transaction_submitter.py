"""Signs, submits and confirms prebuilt swap transactions."""

import base64
import logging
import time

from solana.rpc.api import Client
from solana.rpc.commitment import Confirmed
from solana.rpc.types import TxOpts
from solders.keypair import Keypair
from solders.transaction import VersionedTransaction

from agent_executor.errors import SubmissionError
from agent_executor.fee_calculator import fee_status_for
from agent_executor.models import ConfirmationStatus, SwapPlan, TradeOutcome

logger = logging.getLogger(__name__)


class TransactionSubmitter:
    """Handles signing and broadcast on the Solana network."""

    def __init__(self, client: Client):
        """
        Initialize transaction submitter.

        Args:
            client: Solana RPC client shared with the rest of the cycle
        """
        self.client = client

    @staticmethod
    def sign(unsigned_transaction: str, keypair: Keypair) -> VersionedTransaction:
        """
        Sign a base64 unsigned transaction with the agent keypair.

        Raises:
            SubmissionError: If the payload cannot be decoded or signed
        """
        try:
            unsigned = VersionedTransaction.from_bytes(base64.b64decode(unsigned_transaction))
            return VersionedTransaction(unsigned.message, [keypair])
        except Exception as e:
            raise SubmissionError(f"Signing failed: {type(e).__name__}") from e

    def send_and_confirm(self, signed: VersionedTransaction) -> str:
        """
        Broadcast a signed transaction and wait for confirmation.

        Returns:
            Transaction signature (base58)

        Raises:
            SubmissionError: On broadcast failure, confirmation timeout or on-chain error
        """
        try:
            response = self.client.send_raw_transaction(
                bytes(signed), opts=TxOpts(preflight_commitment=Confirmed)
            )
            signature = response.value
        except Exception as e:
            raise SubmissionError(f"Broadcast failed: {type(e).__name__}: {e}") from e

        logger.info(f"  Transaction sent: {signature}")

        try:
            confirmation = self.client.confirm_transaction(signature, commitment=Confirmed)
        except Exception as e:
            raise SubmissionError(f"Confirmation failed for {signature}: {type(e).__name__}") from e

        statuses = confirmation.value or []
        status = statuses[0] if statuses else None
        if status is None:
            raise SubmissionError(f"No confirmation status for {signature}")
        if status.err is not None:
            raise SubmissionError(f"Transaction {signature} failed: {status.err}")

        return str(signature)

    def submit(self, plan: SwapPlan, keypair: Keypair, platform_fee: int) -> TradeOutcome:
        """
        Sign, submit and confirm a planned swap.

        Failures are reported in the outcome rather than raised; there is no retry
        within the cycle.

        Args:
            plan: Swap plan with the unsigned transaction
            keypair: Decrypted agent keypair
            platform_fee: Fee computed from the quote (informational)

        Returns:
            TradeOutcome with confirmed or failed status
        """
        signature = None
        error = None
        status = ConfirmationStatus.CONFIRMED

        try:
            signed = self.sign(plan.unsigned_transaction, keypair)
            signature = str(signed.signatures[0])
            logger.info("  Transaction signed")
            signature = self.send_and_confirm(signed)
        except SubmissionError as e:
            status = ConfirmationStatus.FAILED
            error = str(e)
            logger.error(f"  Transaction failed: {error}")

        return TradeOutcome(
            signature=signature,
            status=status,
            amount_in=plan.amount_in,
            expected_output=plan.expected_output,
            # No settlement read-back: the quoted output stands in for the actual one
            actual_output=plan.expected_output,
            platform_fee=platform_fee,
            fee_status=fee_status_for(platform_fee),
            timestamp=int(time.time() * 1000),
            error=error,
        )
