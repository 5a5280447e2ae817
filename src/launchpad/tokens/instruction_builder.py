"""
Instruction builders for SPL token creation and transfer.

Both builders are pure: they take already validated parameters and return
the instructions in the order the ledger must execute them. Everything in
one returned list goes into one transaction, so either all of it lands or
none of it does.
"""

from solders.instruction import Instruction
from solders.pubkey import Pubkey
from solders.system_program import CreateAccountParams, create_account
from spl.token.instructions import (
    InitializeMintParams,
    MintToParams,
    TransferCheckedParams,
    create_associated_token_account,
    get_associated_token_address,
    initialize_mint,
    mint_to,
    transfer_checked,
)

from launchpad.core.pubkeys import MINT_SIZE, SystemAddresses
from launchpad.tokens.amounts import to_base_units, validate_decimals
from launchpad.tokens.models import TokenMintSpec, ValidatedTransfer


def holding_account_address(owner: Pubkey, mint: Pubkey) -> Pubkey:
    """Get the associated token account address of `owner` for `mint`."""
    return get_associated_token_address(owner, mint, SystemAddresses.TOKEN_PROGRAM)


def build_mint_creation(
    spec: TokenMintSpec,
    payer: Pubkey,
    mint: Pubkey,
    rent_exempt_balance: int,
) -> list[Instruction]:
    """Build the instructions that create a mint and its initial supply.

    Order:
        1. allocate the mint account, funded by payer, owned by the token program
        2. initialize it as a mint (authority = payer, optional freeze authority)
        3. create payer's associated token account for the new mint
        4. mint the initial supply into that account

    Args:
        spec: Token parameters
        payer: Fee payer, mint authority and initial holder
        mint: Public key of the freshly generated mint key pair
        rent_exempt_balance: Lamports to fund the mint account with

    Returns:
        Exactly four instructions in the order above
    """
    decimals = validate_decimals(spec.decimals)
    supply_base_units = to_base_units(spec.initial_supply_whole, decimals)
    holding_account = holding_account_address(payer, mint)

    allocate_ix = create_account(
        CreateAccountParams(
            from_pubkey=payer,
            to_pubkey=mint,
            lamports=rent_exempt_balance,
            space=MINT_SIZE,
            owner=SystemAddresses.TOKEN_PROGRAM,
        )
    )

    initialize_ix = initialize_mint(
        InitializeMintParams(
            decimals=decimals,
            program_id=SystemAddresses.TOKEN_PROGRAM,
            mint=mint,
            mint_authority=payer,
            freeze_authority=payer if spec.freeze_authority_enabled else None,
        )
    )

    create_holding_ix = create_associated_token_account(
        payer,
        payer,
        mint,
        SystemAddresses.TOKEN_PROGRAM,
    )

    mint_to_ix = mint_to(
        MintToParams(
            program_id=SystemAddresses.TOKEN_PROGRAM,
            mint=mint,
            dest=holding_account,
            mint_authority=payer,
            amount=supply_base_units,
        )
    )

    return [allocate_ix, initialize_ix, create_holding_ix, mint_to_ix]


def build_transfer(
    transfer: ValidatedTransfer,
    payer: Pubkey,
    recipient_account_exists: bool,
) -> list[Instruction]:
    """Build the instructions that move tokens from payer to recipient.

    When the recipient has no associated token account yet, an instruction
    creating it (funded by payer) comes first. Exactly one checked transfer
    instruction follows.

    Args:
        transfer: Validated transfer parameters
        payer: Fee payer and owner of the source token account
        recipient_account_exists: Whether the recipient's associated token
            account is already on the ledger

    Returns:
        One or two instructions
    """
    instructions = []

    source = holding_account_address(payer, transfer.mint)
    destination = holding_account_address(transfer.recipient, transfer.mint)

    if not recipient_account_exists:
        instructions.append(
            create_associated_token_account(
                payer,
                transfer.recipient,
                transfer.mint,
                SystemAddresses.TOKEN_PROGRAM,
            )
        )

    instructions.append(
        transfer_checked(
            TransferCheckedParams(
                program_id=SystemAddresses.TOKEN_PROGRAM,
                source=source,
                mint=transfer.mint,
                dest=destination,
                owner=payer,
                amount=transfer.amount_base_units,
                decimals=transfer.decimals,
            )
        )
    )
    return instructions
