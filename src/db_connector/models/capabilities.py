"""Dialect capabilities model."""

from pydantic import BaseModel, Field


class DialectCapabilities(BaseModel):
    """Flags indicating which statements a dialect can run."""

    alter_column_default: bool = Field(
        default=True,
        description="Supports ALTER TABLE ... ALTER column SET DEFAULT",
    )
    inline_defaults: bool = Field(
        default=False,
        description="Column defaults are embedded in CREATE TABLE instead",
    )
    replace_primary_key: bool = Field(
        default=True,
        description="Supports dropping and re-adding a primary key in place",
    )
    bulk_load: bool = Field(
        default=True,
        description="Supports a native bulk-load statement (LOAD DATA INFILE)",
    )
    statement_timeout: bool = Field(
        default=True,
        description="Supports a per-session statement execution timeout",
    )
    transactions: bool = Field(
        default=True,
        description="Supports explicit transactions",
    )

    def get_supported_features(self) -> list[str]:
        """Get list of supported feature names."""
        return [
            field_name
            for field_name, value in self.model_dump().items()
            if value is True
        ]

    def get_unsupported_features(self) -> list[str]:
        """Get list of unsupported feature names."""
        return [
            field_name
            for field_name, value in self.model_dump().items()
            if value is False
        ]
