"""
Error taxonomy for the token launchpad.

Local errors (InvalidInput, PreconditionUnmet) are raised before any
instruction is built. The remaining kinds only appear once a unit has been
handed to the signer or the ledger has been queried.
"""

from enum import Enum


class FailureKind(Enum):
    """Reported category of a failed operation."""
    INVALID_INPUT = "InvalidInput"
    PRECONDITION_UNMET = "PreconditionUnmet"
    SIGNER_REJECTED = "SignerRejected"
    NETWORK_FAILURE = "NetworkFailure"
    EXECUTION_REJECTED = "ExecutionRejected"
    CONFIRMATION_TIMEOUT = "ConfirmationTimeout"


class LaunchpadError(Exception):
    """Base class for all launchpad errors."""

    kind: FailureKind | None = None


class InvalidInput(LaunchpadError, ValueError):
    """User supplied value is out of range or malformed."""

    kind = FailureKind.INVALID_INPUT


class InvalidAmount(InvalidInput):
    pass


class InvalidAddress(InvalidInput):
    pass


class InvalidDecimals(InvalidInput):
    pass


class PreconditionUnmet(LaunchpadError):
    """No connected identity, no selected token, or similar."""

    kind = FailureKind.PRECONDITION_UNMET


class SignerRejected(LaunchpadError):
    """The wallet or its user declined to authorize a unit."""

    kind = FailureKind.SIGNER_REJECTED


class NetworkFailure(LaunchpadError):
    """Transport-level failure talking to the RPC node."""

    kind = FailureKind.NETWORK_FAILURE


class QueryUnavailable(NetworkFailure):
    """Holding accounts could not be read."""


class ExecutionRejected(LaunchpadError):
    """The ledger accepted the unit but its instructions failed atomically."""

    kind = FailureKind.EXECUTION_REJECTED


class ConfirmationTimeout(LaunchpadError):
    """Confirmation was not observed in time; the unit may still land."""

    kind = FailureKind.CONFIRMATION_TIMEOUT


class StaleAssembly(LaunchpadError):
    """An assembled unit was reused after expiry or after submission.

    Callers must fetch a fresh blockhash and reassemble.
    """
