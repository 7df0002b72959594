import pytest
from solders.pubkey import Pubkey
from solders.signature import Signature

from spl_token_decoder.constants import PROGRAM_ADDRESS
from spl_token_decoder.models import (
    Block,
    CompiledInstruction,
    InnerInstructionGroup,
    Message,
    Transaction,
    TransactionMeta,
)

BLOCK_TIME = 1_700_000_000  # 2023-11-14 22:13:20 UTC


@pytest.fixture
def token_program():
    return Pubkey.from_string(PROGRAM_ADDRESS)


@pytest.fixture
def make_instruction():
    def _make(program_id_index, accounts, data):
        return CompiledInstruction(program_id_index=program_id_index, accounts=list(accounts), data=bytes(data))
    return _make


@pytest.fixture
def make_transaction():
    def _make(account_keys, instructions, inner_groups=None, lookups=None, signature=None):
        return Transaction(
            signatures=[signature or Signature.new_unique()],
            message=Message(
                account_keys=list(account_keys),
                instructions=list(instructions),
                address_table_lookups=list(lookups or []),
            ),
            meta=TransactionMeta(
                inner_instructions=[
                    InnerInstructionGroup(index=index, instructions=list(ixs))
                    for index, ixs in (inner_groups or [])
                ]
            ),
        )
    return _make


@pytest.fixture
def make_block():
    def _make(transactions, slot=1000, parent_slot=999, block_time=BLOCK_TIME):
        return Block(slot=slot, parent_slot=parent_slot, block_time=block_time, transactions=list(transactions))
    return _make
