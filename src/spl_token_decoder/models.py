from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from solders.pubkey import Pubkey
from solders.signature import Signature


# Input structures, supplied already deserialized by the block source

@dataclass(frozen=True)
class CompiledInstruction:
    program_id_index: int
    accounts: List[int]
    data: bytes


@dataclass(frozen=True)
class AddressTableLookup:
    account_key: Pubkey
    writable_indexes: List[int] = field(default_factory=list)
    readonly_indexes: List[int] = field(default_factory=list)


@dataclass(frozen=True)
class Message:
    account_keys: List[Pubkey]
    instructions: List[CompiledInstruction] = field(default_factory=list)
    address_table_lookups: List[AddressTableLookup] = field(default_factory=list)


@dataclass(frozen=True)
class InnerInstructionGroup:
    # Position of the top-level instruction that produced this trace
    index: int
    instructions: List[CompiledInstruction] = field(default_factory=list)


@dataclass(frozen=True)
class TransactionMeta:
    inner_instructions: List[InnerInstructionGroup] = field(default_factory=list)


@dataclass(frozen=True)
class Transaction:
    signatures: List[Signature]
    message: Optional[Message]
    meta: Optional[TransactionMeta]


@dataclass(frozen=True)
class Block:
    slot: int
    parent_slot: int
    block_time: Optional[int]
    transactions: List[Transaction] = field(default_factory=list)


# Output structures

@dataclass(frozen=True)
class InputAccounts:
    """
    Named accounts of one instruction. Roles that do not apply to the
    instruction stay None; trailing multisig signers go to signer_accounts.
    """
    mint: Optional[str] = None
    rent_sysvar: Optional[str] = None
    account: Optional[str] = None
    owner: Optional[str] = None
    signer_accounts: List[str] = field(default_factory=list)
    source: Optional[str] = None
    destination: Optional[str] = None
    delegate: Optional[str] = None
    authority: Optional[str] = None
    payer: Optional[str] = None
    fund_relocation_sys_program: Optional[str] = None
    funding_account: Optional[str] = None
    mint_funding_sys_program: Optional[str] = None


@dataclass(frozen=True)
class InstructionArgs:
    decimals: Optional[int] = None
    mint_authority: Optional[str] = None
    freeze_authority_option: Optional[int] = None
    freeze_authority: Optional[str] = None
    status: Optional[int] = None
    amount: Optional[int] = None
    authority_type: Optional[int] = None
    new_authority_option: Optional[int] = None
    new_authority: Optional[str] = None
    owner: Optional[str] = None
    extension_type: Optional[int] = None
    ui_amount: Optional[float] = None


@dataclass(frozen=True)
class EventRecord:
    block_date: str
    block_time: int
    tx_id: str
    dapp: str
    block_slot: int
    instruction_index: int
    is_inner_instruction: bool
    inner_instruction_index: int
    instruction_type: str
    input_accounts: InputAccounts
    args: InstructionArgs

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
