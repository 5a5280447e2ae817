"""
Packaging of instructions into a single submission unit.
"""

from dataclasses import dataclass, field

from solders.instruction import Instruction
from solders.message import Message
from solders.pubkey import Pubkey

from launchpad.core.errors import StaleAssembly
from launchpad.interfaces.core import FreshnessToken
from launchpad.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class AssembledUnit:
    """An ordered instruction list stamped with a fee payer and blockhash.

    A unit is single-use: once handed to a signer, or once its blockhash has
    expired, it must be reassembled with a fresh token instead of resent.
    """
    instructions: tuple[Instruction, ...]
    payer: Pubkey
    freshness: FreshnessToken
    message: Message
    submitted: bool = field(default=False)

    def is_expired(self, current_block_height: int) -> bool:
        return current_block_height > self.freshness.last_valid_block_height

    def claim(self, current_block_height: int) -> None:
        """Mark the unit as submitted.

        Raises:
            StaleAssembly: The unit was already submitted or has expired
        """
        if self.submitted:
            raise StaleAssembly("Unit was already submitted; reassemble with a fresh blockhash")
        if self.is_expired(current_block_height):
            raise StaleAssembly(
                f"Blockhash {self.freshness.blockhash} expired at block height "
                f"{self.freshness.last_valid_block_height} (now {current_block_height})"
            )
        self.submitted = True


def assemble(
    instructions: list[Instruction],
    payer: Pubkey,
    freshness: FreshnessToken,
) -> AssembledUnit:
    """Package instructions into one atomic unit.

    Args:
        instructions: Instructions in execution order; the order is kept as is
        payer: Fee payer
        freshness: Recent blockhash fetched right before assembly

    Returns:
        Assembled unit ready for signing
    """
    if not instructions:
        raise ValueError("Cannot assemble a unit without instructions")

    message = Message.new_with_blockhash(instructions, payer, freshness.blockhash)
    logger.info(
        f"Assembled unit with {len(instructions)} instruction(s), "
        f"payer {payer}, valid until block {freshness.last_valid_block_height}"
    )
    return AssembledUnit(
        instructions=tuple(instructions),
        payer=payer,
        freshness=freshness,
        message=message,
    )
