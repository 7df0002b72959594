# Address of the SPL Token program whose instructions are decoded
PROGRAM_ADDRESS = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"

# Prefix used by the lookup-table repository for its keys
LOOKUP_TABLE_KEY_PREFIX = "table:"

# Label emitted for opcodes outside the supported set
UNKNOWN_INSTRUCTION = "Unknown Instruction"

PUBKEY_LENGTH = 32
