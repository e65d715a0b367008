"""Database configuration model."""

import logging
import os
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator
from sqlalchemy.engine import URL

logger = logging.getLogger(__name__)


class LoginSpec(BaseModel):
    """Credentials for a network database, in builder form."""

    host: str = Field(..., description="Database host")
    port: int = Field(..., ge=1, le=65535, description="Database port")
    username: str = Field(..., description="Login user")
    password: str = Field(..., description="Login password")
    database: str = Field(..., description="Database name")


class DatabaseConfig(BaseModel):
    """Configuration for the single connection a Database instance owns.

    Exactly one of the two modes is set: network (host, port, username,
    password, database_name) or local file (file_path).
    """

    host: Optional[str] = Field(None, description="Network mode: database host")
    port: int = Field(default=3306, ge=1, le=65535, description="Network mode: port")
    username: Optional[str] = Field(None, description="Network mode: login user")
    password: Optional[str] = Field(None, description="Network mode: login password")
    database_name: Optional[str] = Field(
        None, description="Network mode: database (schema) name"
    )
    file_path: Optional[str] = Field(
        None, description="Local-file mode: path of the SQLite database file"
    )
    debug: bool = Field(
        default=False,
        description="Log every statement and transaction transition at DEBUG level",
    )
    echo_sql: bool = Field(
        default=False,
        description="Echo SQL statements through SQLAlchemy's engine logger",
    )
    statement_timeout: Optional[int] = Field(
        default=None,
        ge=1,
        le=3600,
        description="Statement execution timeout in seconds",
    )
    connect_timeout: int = Field(
        default=10,
        ge=1,
        le=300,
        description="Connection establishment timeout in seconds",
    )

    @model_validator(mode="after")
    def check_single_mode(self) -> "DatabaseConfig":
        """Reject configs that mix or omit both connection modes."""
        network_fields = {
            "host": self.host,
            "username": self.username,
            "password": self.password,
            "database_name": self.database_name,
        }
        has_network = any(value is not None for value in network_fields.values())

        if self.file_path is not None and has_network:
            raise ValueError(
                "Choose either a local file or network credentials, not both"
            )
        if self.file_path is None:
            missing = [name for name, value in network_fields.items() if value is None]
            if missing:
                raise ValueError(
                    f"Network mode requires {', '.join(missing)} "
                    "(or set file_path for local-file mode)"
                )
        return self

    @classmethod
    def from_login(cls, login: LoginSpec, **options) -> "DatabaseConfig":
        """Build a network-mode config from a LoginSpec."""
        return cls(
            host=login.host,
            port=login.port,
            username=login.username,
            password=login.password,
            database_name=login.database,
            **options,
        )

    @classmethod
    def from_env(cls, prefix: str = "DB_") -> "DatabaseConfig":
        """
        Load configuration from the environment (and a .env file if present).

        Reads ``{prefix}FILE`` for local-file mode, otherwise ``{prefix}HOST``,
        ``{prefix}PORT``, ``{prefix}USERNAME``, ``{prefix}PASSWORD`` and
        ``{prefix}NAME``. ``{prefix}DEBUG`` enables debug logging.
        """
        load_dotenv()

        debug = os.getenv(f"{prefix}DEBUG", "false").lower() in {"1", "true", "yes"}
        timeout = os.getenv(f"{prefix}STATEMENT_TIMEOUT")
        options = {
            "debug": debug,
            "statement_timeout": int(timeout) if timeout else None,
        }

        file_path = os.getenv(f"{prefix}FILE")
        if file_path:
            logger.info(f"Using local database file from {prefix}FILE")
            return cls(file_path=file_path, **options)

        return cls(
            host=os.getenv(f"{prefix}HOST"),
            port=int(os.getenv(f"{prefix}PORT", "3306")),
            username=os.getenv(f"{prefix}USERNAME"),
            password=os.getenv(f"{prefix}PASSWORD"),
            database_name=os.getenv(f"{prefix}NAME"),
            **options,
        )

    @property
    def mode(self) -> Literal["network", "file"]:
        """Connection mode chosen at construction time."""
        return "file" if self.file_path is not None else "network"

    @property
    def dialect(self) -> str:
        """SQL dialect spoken over the connection."""
        return "sqlite" if self.mode == "file" else "mysql"

    @property
    def is_memory(self) -> bool:
        """Whether local-file mode points at an in-memory database."""
        return self.file_path == ":memory:"

    @property
    def resolved_path(self) -> Optional[str]:
        """Absolute path of the database file (local-file mode only)."""
        if self.file_path is None or self.is_memory:
            return self.file_path
        return str(Path(self.file_path).expanduser().resolve())

    @property
    def url(self) -> URL:
        """SQLAlchemy URL for the configured mode."""
        if self.mode == "file":
            return URL.create("sqlite", database=self.resolved_path)

        return URL.create(
            "mysql+pymysql",
            username=self.username,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.database_name,
        )

    @property
    def display_url(self) -> str:
        """Connection URL with the password masked."""
        return self.url.render_as_string(hide_password=True)

    @property
    def legacy_url(self) -> str:
        """JDBC-style connection string, for display and log correlation."""
        if self.mode == "file":
            return f"jdbc:sqlite:{self.resolved_path}"
        return (
            f"jdbc:mysql://{self.host}:{self.port}/{self.database_name}"
            "?autoReconnect=true"
        )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "host": "localhost",
                    "port": 3306,
                    "username": "app",
                    "password": "secret",
                    "database_name": "game",
                },
                {"file_path": "./data/game.db", "debug": True},
            ]
        }
    }
