"""Conversion of JSON-RPC ``getBlock`` responses into the Block model.

Expects blocks fetched with ``encoding="json"`` and
``maxSupportedTransactionVersion=0``: account keys, signatures and lookup
table addresses are base58 strings and instruction data is base58 encoded.
"""
from typing import Any, Dict, List, Optional

import base58
from solders.pubkey import Pubkey
from solders.signature import Signature

from spl_token_decoder.exceptions import BlockUnavailableError
from spl_token_decoder.models import (
    AddressTableLookup,
    Block,
    CompiledInstruction,
    InnerInstructionGroup,
    Message,
    Transaction,
    TransactionMeta,
)


def block_from_rpc_json(payload: Dict[str, Any], slot: int) -> Block:
    """
    Build a Block from a ``getBlock`` result.

    :param payload: dict, the bare result or the full JSON-RPC envelope
    :param slot: int, slot the block was fetched for (not part of the result)
    :return: Block
    :raises BlockUnavailableError: if the response holds an RPC error or a null result
    """
    if not isinstance(payload, dict):
        raise BlockUnavailableError(f"Response for slot {slot} is not a JSON object")
    if "error" in payload:
        error = payload["error"] or {}
        raise BlockUnavailableError(
            f"RPC error for slot {slot}: {error.get('code')} {error.get('message')}"
        )

    result = payload.get("result", payload) if "jsonrpc" in payload else payload
    if result is None:
        raise BlockUnavailableError(f"No block returned for slot {slot}")
    if "parentSlot" not in result:
        raise BlockUnavailableError(f"Response for slot {slot} is not a block")

    return Block(
        slot=slot,
        parent_slot=result["parentSlot"],
        block_time=result.get("blockTime"),
        transactions=[_transaction(tx) for tx in result.get("transactions") or []],
    )


def _transaction(entry: Dict[str, Any]) -> Transaction:
    raw = entry.get("transaction") or {}
    message = raw.get("message")
    meta = entry.get("meta")
    return Transaction(
        signatures=[Signature.from_string(sig) for sig in raw.get("signatures") or []],
        message=_message(message) if message is not None else None,
        meta=_meta(meta) if meta is not None else None,
    )


def _message(message: Dict[str, Any]) -> Message:
    return Message(
        account_keys=[Pubkey.from_string(key) for key in message.get("accountKeys") or []],
        instructions=[_instruction(ix) for ix in message.get("instructions") or []],
        address_table_lookups=[
            AddressTableLookup(
                account_key=Pubkey.from_string(lookup["accountKey"]),
                writable_indexes=list(lookup.get("writableIndexes") or []),
                readonly_indexes=list(lookup.get("readonlyIndexes") or []),
            )
            for lookup in message.get("addressTableLookups") or []
        ],
    )


def _meta(meta: Dict[str, Any]) -> TransactionMeta:
    # Nodes without CPI recording return null here
    groups: Optional[List[Dict[str, Any]]] = meta.get("innerInstructions")
    return TransactionMeta(
        inner_instructions=[
            InnerInstructionGroup(
                index=group["index"],
                instructions=[_instruction(ix) for ix in group.get("instructions") or []],
            )
            for group in groups or []
        ]
    )


def _instruction(ix: Dict[str, Any]) -> CompiledInstruction:
    return CompiledInstruction(
        program_id_index=ix["programIdIndex"],
        accounts=list(ix.get("accounts") or []),
        data=base58.b58decode(ix.get("data") or ""),
    )
