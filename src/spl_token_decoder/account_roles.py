from typing import Sequence

from spl_token_decoder.exceptions import UnresolvedAccountIndexError
from spl_token_decoder.instructions import InstructionDescriptor
from spl_token_decoder.models import InputAccounts, InstructionArgs


def resolve_account(index: int, resolved_accounts: Sequence[str]) -> str:
    if index >= len(resolved_accounts):
        raise UnresolvedAccountIndexError(index, len(resolved_accounts))
    return resolved_accounts[index]


def assign_roles(
    descriptor: InstructionDescriptor,
    account_indices: Sequence[int],
    resolved_accounts: Sequence[str],
) -> InputAccounts:
    """
    Map an instruction's account indices to named roles.

    Fixed roles are taken from the front of ``account_indices`` in the order
    the instruction declares them; whatever is left over (multisig signers)
    becomes ``signer_accounts``. An instruction with fewer accounts than
    roles simply leaves the trailing roles unset.

    :raises UnresolvedAccountIndexError: if an index is beyond ``resolved_accounts``
    """
    addresses = [resolve_account(idx, resolved_accounts) for idx in account_indices]
    fixed, signers = addresses[:len(descriptor.roles)], addresses[len(descriptor.roles):]
    named = dict(zip(descriptor.roles, fixed))
    return InputAccounts(signer_accounts=signers, **named)


def build_args(descriptor: InstructionDescriptor) -> InstructionArgs:
    """Project decoded fields onto the output argument struct."""
    return InstructionArgs(**descriptor.fields)
