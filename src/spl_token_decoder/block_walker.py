from typing import List, Sequence, Tuple

from spl_token_decoder.account_roles import assign_roles, build_args, resolve_account
from spl_token_decoder.address_resolver import LookupTableRepository, resolve_accounts
from spl_token_decoder.constants import PROGRAM_ADDRESS
from spl_token_decoder.exceptions import (
    InstructionError,
    MissingBlockTimestampError,
    MissingMessageError,
    MissingSignatureError,
    MissingTransactionMetaError,
    TransactionError,
)
from spl_token_decoder.instructions import decode_instruction
from spl_token_decoder.models import Block, CompiledInstruction, EventRecord, Transaction
from spl_token_decoder.utils import convert_to_date, logger

class BlockWalker:
    """
    Turns one block into the ordered list of token program events.

    Events are emitted depth-first: for each top-level instruction in message
    order, its own event (if it targets the program) followed by the events of
    its inner instructions in trace order.
    """

    def __init__(
        self,
        lookup_repository: LookupTableRepository,
        program_address: str = PROGRAM_ADDRESS,
        legacy_event_indexing: bool = True,
    ):
        """
        :param lookup_repository: read-only source of resolved address lookup tables
        :param program_address: base58 address of the program to decode
        :param legacy_event_indexing: reproduce the historical slot and index values:
            top-level events use parent_slot and the instruction's program_id_index,
            inner events use parent_slot + 1, the parent's program_id_index and the
            inner instruction's program_id_index. When False, events use the block
            slot and positional indexes.
        """
        self.lookup_repository = lookup_repository
        self.program_address = program_address
        self.legacy_event_indexing = legacy_event_indexing

    def process_block(self, block: Block) -> List[EventRecord]:
        """
        Decode every target-program instruction of a block.

        :param block: Block, fully populated block
        :return: List[EventRecord], in emission order
        :raises BlockError: if the block or one of its transactions lacks a required field
        """
        if block.block_time is None:
            raise MissingBlockTimestampError(f"Block at slot {block.slot} has no block time")

        events: List[EventRecord] = []
        skipped_transactions = 0
        skipped_instructions = 0

        for tx_position, tx in enumerate(block.transactions):
            self._validate_transaction(block, tx_position, tx)
            try:
                tx_events, tx_skipped = self.process_transaction(block, tx)
            except TransactionError as e:
                skipped_transactions += 1
                logger.warning(f"Skipping transaction {tx.signatures[0]} in slot {block.slot}: {e}")
                continue
            events.extend(tx_events)
            skipped_instructions += tx_skipped

        logger.info(
            f"Processed slot {block.slot}: {len(events)} events from {len(block.transactions)} transactions "
            f"({skipped_transactions} transactions and {skipped_instructions} instructions skipped)"
        )
        return events

    def process_transaction(self, block: Block, tx: Transaction) -> Tuple[List[EventRecord], int]:
        """
        Decode the target-program instructions of one transaction.

        Nothing is returned for a transaction that raises: its partial events
        are discarded with it.

        :return: Tuple of (events, number of malformed instructions skipped)
        :raises TransactionError: if an account index cannot be resolved
        """
        accounts = resolve_accounts(tx.message, self.lookup_repository)
        events: List[EventRecord] = []
        skipped = 0

        for position, instruction in enumerate(tx.message.instructions):
            if self._targets_program(instruction, accounts):
                slot, index, inner_index = self._top_level_indexes(block, position, instruction)
                event = self._build_event(block, tx, instruction, accounts, slot, index, False, inner_index)
                if event is None:
                    skipped += 1
                else:
                    events.append(event)

            for group in tx.meta.inner_instructions:
                if group.index != position:
                    continue
                for inner_position, inner in enumerate(group.instructions):
                    if not self._targets_program(inner, accounts):
                        continue
                    slot, index, inner_index = self._inner_indexes(
                        block, position, instruction, inner_position, inner
                    )
                    event = self._build_event(block, tx, inner, accounts, slot, index, True, inner_index)
                    if event is None:
                        skipped += 1
                    else:
                        events.append(event)

        return events, skipped

    def _validate_transaction(self, block: Block, tx_position: int, tx: Transaction) -> None:
        if not tx.signatures:
            raise MissingSignatureError(f"Transaction {tx_position} in slot {block.slot} has no signatures")
        if tx.message is None:
            raise MissingMessageError(f"Transaction {tx.signatures[0]} in slot {block.slot} has no message")
        if tx.meta is None:
            raise MissingTransactionMetaError(f"Transaction {tx.signatures[0]} in slot {block.slot} has no meta")

    def _targets_program(self, instruction: CompiledInstruction, accounts: Sequence[str]) -> bool:
        return resolve_account(instruction.program_id_index, accounts) == self.program_address

    def _top_level_indexes(self, block: Block, position: int, instruction: CompiledInstruction):
        if self.legacy_event_indexing:
            return block.parent_slot, instruction.program_id_index, 0
        return block.slot, position, 0

    def _inner_indexes(
        self,
        block: Block,
        position: int,
        parent: CompiledInstruction,
        inner_position: int,
        inner: CompiledInstruction,
    ):
        if self.legacy_event_indexing:
            return block.parent_slot + 1, parent.program_id_index, inner.program_id_index
        return block.slot, position, inner_position

    def _build_event(
        self,
        block: Block,
        tx: Transaction,
        instruction: CompiledInstruction,
        accounts: Sequence[str],
        block_slot: int,
        instruction_index: int,
        is_inner: bool,
        inner_instruction_index: int,
    ):
        try:
            descriptor = decode_instruction(instruction.data)
        except InstructionError as e:
            logger.warning(f"Skipping instruction in transaction {tx.signatures[0]}: {e}")
            return None

        if descriptor.is_unknown:
            logger.debug(f"Unknown opcode {descriptor.opcode} in transaction {tx.signatures[0]}")

        return EventRecord(
            block_date=convert_to_date(block.block_time),
            block_time=block.block_time,
            tx_id=str(tx.signatures[0]),
            dapp=self.program_address,
            block_slot=block_slot,
            instruction_index=instruction_index,
            is_inner_instruction=is_inner,
            inner_instruction_index=inner_instruction_index,
            instruction_type=descriptor.name,
            input_accounts=assign_roles(descriptor, instruction.accounts, accounts),
            args=build_args(descriptor),
        )
