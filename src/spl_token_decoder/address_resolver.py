from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

import polars as pl

from spl_token_decoder.constants import LOOKUP_TABLE_KEY_PREFIX
from spl_token_decoder.exceptions import LookupTableIndexError
from spl_token_decoder.models import Message
from spl_token_decoder.utils import logger

# ABC is used to define a read-only interface over previously resolved
# address lookup tables. Implementations must be safe for concurrent reads;
# the resolver never writes to them.
class LookupTableRepository(ABC):
    @abstractmethod
    def get_resolved(self, table_key: str) -> Optional[List[str]]:
        """Return the ordered addresses of a lookup table, or None if unknown."""
        pass

class InMemoryLookupTableRepository(LookupTableRepository):
    def __init__(self, tables: Optional[Mapping[str, Sequence[str]]] = None):
        self._tables = {key: list(addresses) for key, addresses in (tables or {}).items()}

    def get_resolved(self, table_key: str) -> Optional[List[str]]:
        addresses = self._tables.get(table_key)
        return list(addresses) if addresses is not None else None

    def __len__(self):
        return len(self._tables)

class ParquetLookupTableRepository(InMemoryLookupTableRepository):
    """
    Lookup tables loaded once from a Parquet snapshot.

    The file holds one row per table with the columns ``table_key`` (str)
    and ``addresses`` (list of str). A missing file gives an empty
    repository, so every lookup falls through as an unresolved table.
    """

    def __init__(self, path: str):
        self.path = Path(path)
        if not self.path.exists():
            logger.warning(f"Lookup table snapshot {self.path} does not exist, starting with no tables")
            super().__init__()
            return

        try:
            df = pl.read_parquet(self.path, columns=["table_key", "addresses"])
        except Exception as e:
            logger.error(f"Error reading lookup table snapshot {self.path}: {e}")
            raise

        super().__init__(
            {row["table_key"]: row["addresses"] or [] for row in df.iter_rows(named=True)}
        )
        logger.info(f"Loaded {len(self)} lookup tables from {self.path}")

def get_lookup_repository(store_type: str = "memory", **kwargs) -> LookupTableRepository:
    if store_type == "memory":
        return InMemoryLookupTableRepository(kwargs.get("tables"))
    elif store_type == "parquet":
        return ParquetLookupTableRepository(kwargs["path"])
    else:
        raise ValueError(f"Unsupported lookup table store type: {store_type}")

def table_key(table_address) -> str:
    return f"{LOOKUP_TABLE_KEY_PREFIX}{table_address}"

def resolve_accounts(message: Message, repository: LookupTableRepository) -> List[str]:
    """
    Build the ordered account list that instruction indices point into.

    The result is the static account keys, then every writable address pulled
    from the lookup tables, then every readonly one, each group in lookup
    order and index-list order. Tables missing from the repository add nothing.

    :param message: Message, the transaction message
    :param repository: LookupTableRepository, source of resolved table contents
    :return: List[str], base58 addresses
    :raises LookupTableIndexError: if a lookup index is beyond the table's content
    """
    accounts = [str(key) for key in message.account_keys]
    writable_accounts: List[str] = []
    readonly_accounts: List[str] = []

    for lookup in message.address_table_lookups:
        key = table_key(lookup.account_key)
        table = repository.get_resolved(key)
        if table is None:
            logger.debug(f"Lookup table {key} not found in repository, skipping its indexes")
            continue

        writable_accounts.extend(_select(table, lookup.writable_indexes, key))
        readonly_accounts.extend(_select(table, lookup.readonly_indexes, key))

    return accounts + writable_accounts + readonly_accounts

def _select(table: List[str], indexes: List[int], key: str) -> List[str]:
    selected = []
    for idx in indexes:
        if idx >= len(table):
            raise LookupTableIndexError(key, idx, len(table))
        selected.append(table[idx])
    return selected
