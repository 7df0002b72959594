import polars as pl

class EventSchemas:
    """
    Defines polars schemas for the decoded token program events.

    Nested structs mirror InputAccounts and InstructionArgs so that rows built
    from EventRecord.to_dict() load without type inference, even when every
    value of an optional field is null.
    """

    @staticmethod
    def event_schema():
        """
        Returns the schema of one event row.

        :return: dict, column name to polars dtype
        """
        return {
            "block_date": pl.String,
            "block_time": pl.Int64,
            "tx_id": pl.String,
            "dapp": pl.String,
            "block_slot": pl.UInt64,
            "instruction_index": pl.UInt32,
            "is_inner_instruction": pl.Boolean,
            "inner_instruction_index": pl.UInt32,
            "instruction_type": pl.String,
            "input_accounts": EventSchemas._input_accounts_schema(),
            "args": EventSchemas._args_schema(),
        }

    @staticmethod
    def _input_accounts_schema():
        return pl.Struct({
            "mint": pl.String,
            "rent_sysvar": pl.String,
            "account": pl.String,
            "owner": pl.String,
            "signer_accounts": pl.List(pl.String),
            "source": pl.String,
            "destination": pl.String,
            "delegate": pl.String,
            "authority": pl.String,
            "payer": pl.String,
            "fund_relocation_sys_program": pl.String,
            "funding_account": pl.String,
            "mint_funding_sys_program": pl.String,
        })

    @staticmethod
    def _args_schema():
        return pl.Struct({
            "decimals": pl.UInt8,
            "mint_authority": pl.String,
            "freeze_authority_option": pl.UInt8,
            "freeze_authority": pl.String,
            "status": pl.UInt8,
            "amount": pl.UInt64,
            "authority_type": pl.UInt8,
            "new_authority_option": pl.UInt8,
            "new_authority": pl.String,
            "owner": pl.String,
            "extension_type": pl.UInt8,
            "ui_amount": pl.Float64,
        })
