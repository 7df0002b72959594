class SplTokenDecoderError(Exception):
    """Base class for all errors raised while decoding a block."""


class BlockError(SplTokenDecoderError):
    """The whole block cannot be processed."""


class MissingBlockTimestampError(BlockError):
    pass


class MissingTransactionMetaError(BlockError):
    pass


class MissingMessageError(BlockError):
    pass


class MissingSignatureError(BlockError):
    pass


class BlockUnavailableError(BlockError):
    """The RPC response carries no block (error envelope or null result)."""


class TransactionError(SplTokenDecoderError):
    """The owning transaction is skipped; processing continues with the next one."""


class UnresolvedAccountIndexError(TransactionError):
    def __init__(self, index, account_count):
        super().__init__(
            f"Account index {index} is out of range for {account_count} resolved accounts"
        )
        self.index = index
        self.account_count = account_count


class LookupTableIndexError(TransactionError):
    def __init__(self, table_key, index, table_size):
        super().__init__(
            f"Index {index} is out of range for lookup table {table_key} with {table_size} entries"
        )
        self.table_key = table_key
        self.index = index
        self.table_size = table_size


class InstructionError(SplTokenDecoderError):
    """A single instruction is skipped."""


class MalformedInstructionPayloadError(InstructionError):
    pass
