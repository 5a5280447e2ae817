"""
Submission of assembled units and classification of their outcome.
"""

import asyncio
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

from solders.keypair import Keypair

from launchpad.core.errors import (
    ExecutionRejected,
    FailureKind,
    LaunchpadError,
    NetworkFailure,
    SignerRejected,
)
from launchpad.core.pubkeys import explorer_url
from launchpad.interfaces.core import LedgerReader, Signer
from launchpad.tokens.assembler import AssembledUnit
from launchpad.tokens.models import (
    SubmissionFailure,
    SubmissionOutcome,
    SubmissionSuccess,
)
from launchpad.utils.logger import get_logger

logger = get_logger(__name__)

EXECUTION_REJECTED_REASON = "execution rejected"
CONFIRMATION_TIMEOUT_REASON = "confirmation timeout"


class SubmissionState(Enum):
    SENDING = "sending"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    TIMED_OUT = "timed_out"


class SubmissionCoordinator:
    """Sends a unit through the signer and waits for the ledger's verdict.

    Each call to `submit` is one pass through
    SENDING -> AWAITING_CONFIRMATION -> CONFIRMED | REJECTED | TIMED_OUT.
    Nothing is retried automatically.
    """

    def __init__(
        self,
        ledger: LedgerReader,
        signer: Signer,
        max_attempts: int = 30,
        poll_interval: float = 1.0,
        cluster: str = "devnet",
    ):
        """Initialize the coordinator.

        Args:
            ledger: Ledger reader used for expiry checks and confirmation
            signer: Connected wallet
            max_attempts: Confirmation polls before giving up
            poll_interval: Seconds between confirmation polls
            cluster: Cluster name used in explorer links
        """
        self.ledger = ledger
        self.signer = signer
        self.max_attempts = max_attempts
        self.poll_interval = poll_interval
        self.cluster = cluster

    async def submit(
        self,
        unit: AssembledUnit,
        co_signers: list[Keypair] | None = None,
        read_back: Callable[[], Awaitable[Any]] | None = None,
    ) -> SubmissionOutcome:
        """Submit a unit and report its terminal outcome.

        Args:
            unit: Freshly assembled unit
            co_signers: Extra key pairs that must sign (e.g. a new mint)
            read_back: Awaited after a confirmed success, e.g. a balance refresh

        Returns:
            SubmissionSuccess or SubmissionFailure

        Raises:
            StaleAssembly: The unit was already submitted or has expired
        """
        unit.claim(await self.ledger.get_block_height())

        state = SubmissionState.SENDING
        try:
            signature = await self.signer.authorize_and_send(unit, co_signers or [])
        except (SignerRejected, NetworkFailure, ExecutionRejected) as e:
            logger.error(f"Submission failed while {state.value}: {e!s}")
            return SubmissionFailure(kind=e.kind, reason=str(e))

        state = SubmissionState.AWAITING_CONFIRMATION
        logger.info(f"Unit sent: {signature}, awaiting confirmation")

        state, error = await self._await_confirmation(signature)

        if state == SubmissionState.TIMED_OUT:
            logger.warning(
                f"No confirmation for {signature} after {self.max_attempts} attempts; "
                "it may still land, re-check before resubmitting"
            )
            return SubmissionFailure(
                kind=FailureKind.CONFIRMATION_TIMEOUT,
                reason=f"{CONFIRMATION_TIMEOUT_REASON}: {signature}",
            )

        if state == SubmissionState.REJECTED:
            logger.error(f"Unit {signature} failed on-chain: {error}")
            return SubmissionFailure(
                kind=FailureKind.EXECUTION_REJECTED,
                reason=f"{EXECUTION_REJECTED_REASON}: {error}",
            )

        logger.info(f"Unit confirmed: {signature}")
        if read_back is not None:
            await self._run_read_back(read_back)

        return SubmissionSuccess(
            signature=signature,
            explorer_url=explorer_url("tx", signature, self.cluster),
        )

    async def _await_confirmation(self, signature: str) -> tuple[SubmissionState, str | None]:
        """Poll the ledger until the unit settles or attempts run out."""
        try:
            for attempt in range(self.max_attempts):
                try:
                    status = await self.ledger.confirm(signature)
                except NetworkFailure as e:
                    logger.warning(
                        f"Confirmation poll {attempt + 1}/{self.max_attempts} failed: {e!s}"
                    )
                    status = None

                if status is not None:
                    if status.error is None:
                        return SubmissionState.CONFIRMED, None
                    return SubmissionState.REJECTED, status.error

                if attempt < self.max_attempts - 1:
                    await asyncio.sleep(self.poll_interval)
        except asyncio.CancelledError:
            logger.warning(
                f"Stopped waiting for {signature}; the broadcast cannot be retracted"
            )
            raise

        return SubmissionState.TIMED_OUT, None

    @staticmethod
    async def _run_read_back(read_back: Callable[[], Awaitable[Any]]) -> None:
        try:
            await read_back()
        except LaunchpadError as e:
            logger.warning(f"Read-back after confirmation failed: {e!s}")
