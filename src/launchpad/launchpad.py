"""
Token launchpad operations exposed to the presentation layer.

Each operation is single-shot and keeps no state between calls apart from
the displayed holdings. Expected failures (bad input, missing wallet,
rejection, timeout) come back as SubmissionFailure; transport failures on
reads propagate as NetworkFailure.
"""

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from launchpad.core.errors import (
    FailureKind,
    InvalidInput,
    PreconditionUnmet,
)
from launchpad.core.pubkeys import (
    MINT_DECIMALS_OFFSET,
    MINT_SIZE,
    SystemAddresses,
    explorer_url,
)
from launchpad.interfaces.core import LedgerReader, Signer
from launchpad.tokens.addresses import parse_address
from launchpad.tokens.amounts import to_base_units, validate_amount, validate_decimals
from launchpad.tokens.assembler import assemble
from launchpad.tokens.coordinator import SubmissionCoordinator
from launchpad.tokens.holdings import HoldingsBoard
from launchpad.tokens.instruction_builder import (
    build_mint_creation,
    build_transfer,
    holding_account_address,
)
from launchpad.tokens.models import (
    CreateTokenResult,
    HoldingRecord,
    SubmissionFailure,
    SubmissionOutcome,
    TokenMintSpec,
    TransferRequest,
    ValidatedTransfer,
)
from launchpad.utils.logger import get_logger

logger = get_logger(__name__)


class TokenLaunchpad:
    """Creates tokens, transfers balances and tracks the wallet's holdings."""

    def __init__(
        self,
        ledger: LedgerReader,
        signer: Signer,
        coordinator: SubmissionCoordinator | None = None,
        cluster: str = "devnet",
    ):
        """Initialize the launchpad.

        Args:
            ledger: Ledger reader
            signer: Connected wallet
            coordinator: Submission coordinator, built from ledger and signer if omitted
            cluster: Cluster name used in explorer links
        """
        self.ledger = ledger
        self.signer = signer
        self.cluster = cluster
        self.coordinator = coordinator or SubmissionCoordinator(ledger, signer, cluster=cluster)
        self.holdings_board = HoldingsBoard(ledger)

    async def create_token(self, spec: TokenMintSpec) -> CreateTokenResult:
        """Create a new mint and mint its initial supply to the wallet.

        Args:
            spec: Token parameters

        Returns:
            CreateTokenResult with the outcome and the new mint address
        """
        try:
            payer = self._require_identity()
            self._validate_mint_spec(spec)
        except (InvalidInput, PreconditionUnmet) as e:
            logger.error(f"Token creation refused: {e!s}")
            return CreateTokenResult(outcome=_failure(e), spec=spec)

        # The private half stays inside this call; only the public key leaves it.
        mint_keypair = Keypair()
        mint = mint_keypair.pubkey()
        logger.info(
            f"Creating token {spec.symbol} ({spec.name}) with mint {mint}, "
            f"{spec.decimals} decimals, supply {spec.initial_supply_whole}"
        )

        rent = await self.ledger.get_minimum_rent_exempt_balance(MINT_SIZE)
        instructions = build_mint_creation(spec, payer, mint, rent)
        unit = assemble(instructions, payer, await self.ledger.get_freshness_token())

        outcome = await self.coordinator.submit(
            unit,
            [mint_keypair],
            read_back=lambda: self.holdings_board.refresh(payer),
        )
        if outcome.success:
            logger.info(f"Token created successfully! Mint: {mint}")

        return CreateTokenResult(
            outcome=outcome,
            spec=spec,
            mint=mint,
            mint_explorer_url=explorer_url("address", mint, self.cluster),
        )

    async def transfer_token(self, request: TransferRequest) -> SubmissionOutcome:
        """Transfer tokens from the wallet to a recipient.

        The recipient's associated token account is created in the same
        transaction when it does not exist yet.
        """
        try:
            payer = self._require_identity()
            transfer = await self.validate_transfer(request)
        except (InvalidInput, PreconditionUnmet) as e:
            logger.error(f"Transfer refused: {e!s}")
            return _failure(e)

        destination = holding_account_address(transfer.recipient, transfer.mint)
        recipient_account_exists = await self.ledger.get_account_info(destination) is not None
        if not recipient_account_exists:
            logger.info(f"Recipient token account {destination} will be created")

        instructions = build_transfer(transfer, payer, recipient_account_exists)
        unit = assemble(instructions, payer, await self.ledger.get_freshness_token())

        logger.info(
            f"Transferring {transfer.amount_base_units} base units of {transfer.mint} "
            f"to {transfer.recipient}"
        )
        return await self.coordinator.submit(
            unit,
            read_back=lambda: self.holdings_board.refresh(payer),
        )

    async def refresh_holdings(self, owner: Pubkey | None = None) -> frozenset[HoldingRecord]:
        """Re-read the token holdings of `owner` (default: the connected wallet).

        Raises:
            PreconditionUnmet: No owner given and no wallet connected
            QueryUnavailable: The node could not be reached
        """
        if owner is None:
            owner = self._require_identity()
        return await self.holdings_board.refresh(owner)

    async def validate_transfer(self, request: TransferRequest) -> ValidatedTransfer:
        """Turn raw transfer input into a ValidatedTransfer.

        Everything that can be checked locally is checked before the mint
        account is read for its decimals.

        Raises:
            PreconditionUnmet: No token selected, or the mint does not exist
            InvalidInput: Bad recipient address or amount
        """
        if request.mint is None:
            raise PreconditionUnmet("No token selected")

        recipient = parse_address(request.recipient_address_raw)
        validate_amount(request.amount_whole)
        decimals = await self.get_mint_decimals(request.mint)
        amount = to_base_units(request.amount_whole, decimals)
        if amount == 0:
            raise InvalidInput(
                f"Transfer amount {request.amount_whole} is zero at {decimals} decimals"
            )

        return ValidatedTransfer(
            mint=request.mint,
            recipient=recipient,
            amount_base_units=amount,
            decimals=decimals,
        )

    async def get_mint_decimals(self, mint: Pubkey) -> int:
        """Read the decimals of a mint from its account data."""
        record = await self.ledger.get_account_info(mint)
        if record is None:
            raise PreconditionUnmet(f"Mint {mint} does not exist")
        if record.owner != SystemAddresses.TOKEN_PROGRAM or len(record.data) <= MINT_DECIMALS_OFFSET:
            raise PreconditionUnmet(f"Account {mint} is not a token mint")
        return record.data[MINT_DECIMALS_OFFSET]

    def _require_identity(self) -> Pubkey:
        identity = self.signer.identity
        if identity is None:
            raise PreconditionUnmet("Please connect your wallet first")
        return identity

    @staticmethod
    def _validate_mint_spec(spec: TokenMintSpec) -> None:
        if not spec.name or not spec.name.strip():
            raise InvalidInput("Token name is required")
        if not spec.symbol or not spec.symbol.strip():
            raise InvalidInput("Token symbol is required")
        to_base_units(spec.initial_supply_whole, validate_decimals(spec.decimals))


def _failure(error: InvalidInput | PreconditionUnmet) -> SubmissionFailure:
    kind = error.kind or FailureKind.INVALID_INPUT
    return SubmissionFailure(kind=kind, reason=str(error))
