"""
Decoding of SPL Token instruction payloads.

Every supported opcode is described by one entry of ``INSTRUCTION_LAYOUTS``:
a ``construct`` Struct for the bytes that follow the opcode byte and the
ordered account roles the instruction expects. Supporting a new opcode means
adding an entry.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from construct import (
    Adapter,
    Bytes,
    ConstructError,
    Float64l,
    If,
    Int8ul,
    Int64ul,
    OneOf,
    Struct,
)
from solders.pubkey import Pubkey

from spl_token_decoder.constants import PUBKEY_LENGTH, UNKNOWN_INSTRUCTION
from spl_token_decoder.exceptions import MalformedInstructionPayloadError


class PubkeyAdapter(Adapter):
    """32 raw bytes exposed as a base58 address string."""

    def _decode(self, obj, context, path):
        return str(Pubkey.from_bytes(obj))

    def _encode(self, obj, context, path):
        if isinstance(obj, Pubkey):
            return bytes(obj)
        return bytes(Pubkey.from_string(obj))


PublicKey = PubkeyAdapter(Bytes(PUBKEY_LENGTH))


def optional_pubkey(name):
    """1-byte discriminant (0 absent, 1 present) followed by the key when present."""
    option = f"{name}_option"
    return (
        option / OneOf(Int8ul, [0, 1]),
        name / If(lambda ctx: ctx[option] == 1, PublicKey),
    )


@dataclass(frozen=True)
class InstructionLayout:
    name: str
    payload: Struct = field(default_factory=Struct)
    roles: Tuple[str, ...] = ()


@dataclass(frozen=True)
class InstructionDescriptor:
    opcode: int
    name: str
    fields: Dict[str, Any] = field(default_factory=dict)
    roles: Tuple[str, ...] = ()

    @property
    def is_unknown(self) -> bool:
        return self.name == UNKNOWN_INSTRUCTION


_AMOUNT = Struct("amount" / Int64ul)
_CHECKED_AMOUNT = Struct("amount" / Int64ul, "decimals" / Int8ul)
_INITIALIZE_MINT = Struct(
    "decimals" / Int8ul,
    "mint_authority" / PublicKey,
    *optional_pubkey("freeze_authority"),
)
_OWNER = Struct("owner" / PublicKey)
_STATUS = Struct("status" / Int8ul)
_EMPTY = Struct()

INSTRUCTION_LAYOUTS: Dict[int, InstructionLayout] = {
    0: InstructionLayout("InitializeMint", _INITIALIZE_MINT, ("mint", "rent_sysvar")),
    1: InstructionLayout("InitializeAccount", _EMPTY, ("account", "mint", "owner", "rent_sysvar")),
    2: InstructionLayout("InitializeMultisig", _STATUS, ("account", "rent_sysvar")),
    3: InstructionLayout("Transfer", _AMOUNT, ("source", "destination", "authority")),
    4: InstructionLayout("Approve", _AMOUNT, ("source", "delegate", "owner")),
    5: InstructionLayout("Revoke", _EMPTY, ("source", "owner")),
    6: InstructionLayout(
        "SetAuthority",
        Struct("authority_type" / Int8ul, *optional_pubkey("new_authority")),
        ("account", "authority"),
    ),
    7: InstructionLayout("MintTo", _AMOUNT, ("mint", "account", "authority")),
    8: InstructionLayout("Burn", _AMOUNT, ("account", "mint", "authority")),
    9: InstructionLayout("CloseAccount", _EMPTY, ("account", "destination", "owner")),
    10: InstructionLayout("FreezeAccount", _EMPTY, ("account", "mint", "authority")),
    11: InstructionLayout("ThawAccount", _EMPTY, ("account", "mint", "authority")),
    12: InstructionLayout("TransferChecked", _CHECKED_AMOUNT, ("source", "mint", "destination", "authority")),
    13: InstructionLayout("ApproveChecked", _CHECKED_AMOUNT, ("source", "mint", "delegate", "owner")),
    14: InstructionLayout("MintToChecked", _CHECKED_AMOUNT, ("mint", "account", "authority")),
    15: InstructionLayout("BurnChecked", _CHECKED_AMOUNT, ("account", "mint", "authority")),
    16: InstructionLayout("InitializeAccount2", _OWNER, ("account", "mint", "rent_sysvar")),
    17: InstructionLayout("SyncNative", _EMPTY, ("account",)),
    18: InstructionLayout("InitializeAccount3", _OWNER, ("account", "mint")),
    19: InstructionLayout("InitializeMultisig2", _STATUS, ("account",)),
    20: InstructionLayout("InitializeMint2", _INITIALIZE_MINT, ("mint",)),
    21: InstructionLayout("GetAccountDataSize", Struct("extension_type" / Int8ul), ("mint",)),
    22: InstructionLayout("InitializeImmutableOwner", _EMPTY, ("account",)),
    23: InstructionLayout("AmountToUiAmount", _AMOUNT, ("mint",)),
    24: InstructionLayout("UiAmountToAmount", Struct("ui_amount" / Float64l), ("mint",)),
    25: InstructionLayout("InitializeMintCloseAuthority", _OWNER, ("mint",)),
    # Extension instructions carry a sub-instruction byte; their account
    # layouts only share a prefix where a role is listed here.
    26: InstructionLayout("TransferFeeExtension"),
    27: InstructionLayout("ConfidentialTransferExtension"),
    28: InstructionLayout("DefaultAccountStateExtension", _EMPTY, ("mint",)),
    29: InstructionLayout(
        "Reallocate", _EMPTY, ("account", "payer", "fund_relocation_sys_program", "owner")
    ),
    30: InstructionLayout("MemoTransferExtension", _EMPTY, ("account", "owner")),
    31: InstructionLayout(
        "CreateNativeMint", _EMPTY, ("funding_account", "mint", "mint_funding_sys_program")
    ),
    32: InstructionLayout("InitializeNonTransferableMint", _EMPTY, ("mint",)),
    33: InstructionLayout("InterestBearingMintExtension", _EMPTY, ("mint",)),
}


def decode(opcode: int, payload: bytes) -> InstructionDescriptor:
    """
    Decode the payload that follows an opcode byte.

    Unsupported opcodes decode to an Unknown descriptor with no fields.
    Bytes past the end of the declared layout are ignored.

    :param opcode: int, first byte of the instruction data
    :param payload: bytes, instruction data after the opcode byte
    :return: InstructionDescriptor
    :raises MalformedInstructionPayloadError: if the payload does not fit the layout
    """
    layout = INSTRUCTION_LAYOUTS.get(opcode)
    if layout is None:
        return InstructionDescriptor(opcode=opcode, name=UNKNOWN_INSTRUCTION)

    try:
        parsed = layout.payload.parse(bytes(payload))
    except ConstructError as e:
        raise MalformedInstructionPayloadError(
            f"{layout.name}: cannot decode {len(payload)} byte payload: {e}"
        ) from e

    fields = {k: v for k, v in parsed.items() if not k.startswith("_")}
    return InstructionDescriptor(opcode=opcode, name=layout.name, fields=fields, roles=layout.roles)


def decode_instruction(data: bytes) -> InstructionDescriptor:
    """Decode full instruction data, opcode byte included."""
    if not data:
        raise MalformedInstructionPayloadError("Instruction data is empty, no opcode byte")
    return decode(data[0], bytes(data[1:]))


def encode(opcode: int, **values) -> bytes:
    """
    Build instruction data for a supported opcode from field values.

    Pubkey values are accepted as base58 strings or solders Pubkeys. An
    optional pubkey needs its ``<name>_option`` value; when it is 0 the key
    itself may be omitted.
    """
    layout = INSTRUCTION_LAYOUTS[opcode]
    values = {sc.name: values.get(sc.name) for sc in layout.payload.subcons}
    return bytes([opcode]) + layout.payload.build(values)
