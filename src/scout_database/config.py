"""Configuration management for scout-database."""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Literal

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from scout_database.db import DatabaseType

ExactColumnType = Literal["string", "integer", "float", "boolean"]

DATA_DIR_NAME = ".scout-database"
INDEX_TABLE_SUFFIX = "index"


def default_database_url() -> str:
    """SQLite file in the user's home directory."""
    db_path = Path.home() / DATA_DIR_NAME / "index.db"
    return DatabaseType.get_db_url(db_path, DatabaseType.FILESYSTEM)


@dataclass(frozen=True)
class IndexingConfiguration:
    """Settings used by the indexer."""

    transaction_attempts: int = 3

    def __post_init__(self):
        if self.transaction_attempts < 1:
            raise ValueError(
                f"transaction_attempts must be at least 1, got {self.transaction_attempts}"
            )


@dataclass(frozen=True)
class SearchConfiguration:
    """Weights and match policy of the ranked search.

    A weight of 1.0 leaves the corresponding score component unchanged.
    """

    idf_weight: float = 1.0
    tf_weight: float = 1.0
    deviation_weight: float = 1.0
    wildcard_last_token: bool = True
    require_match_for_all_tokens: bool = False

    def __post_init__(self):
        # ln() of the inverse document frequency needs a positive argument
        if self.idf_weight <= 0:
            raise ValueError(f"idf_weight must be greater than 0, got {self.idf_weight}")


class ScoutDatabaseConfig(BaseSettings):
    """Settings for the search index, read from ``SCOUT_DB_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SCOUT_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: str = Field(
        default_factory=default_database_url,
        description="SQLAlchemy async URL of the store holding the index table",
    )
    table_prefix: str = Field(
        default="scout_",
        description="Prepended to the index table name without any separator",
    )
    tokenizer: str = Field(default="unicode", description="Tokenizer used for documents and queries")
    stemmer: str = Field(default="porter", description="Stemmer language, 'porter' or 'null'")

    transaction_attempts: int = Field(
        default=3,
        ge=1,
        description="Attempts granted to an indexing transaction before it fails",
    )
    exact_match_columns: Dict[str, ExactColumnType] = Field(
        default_factory=dict,
        description="Extra index columns holding exact-match values, e.g. {'tenant_id': 'string'}",
    )

    idf_weight: float = Field(
        default=1.0, gt=0, description="Weight of the inverse document frequency"
    )
    tf_weight: float = Field(default=1.0, description="Weight of the term frequency")
    deviation_weight: float = Field(default=1.0, description="Weight of the term length deviation")
    wildcard_last_token: bool = Field(
        default=True, description="Match the last query token as a prefix"
    )
    require_match_for_all_tokens: bool = Field(
        default=False, description="Only return documents matching every query token"
    )

    @field_validator("exact_match_columns")
    @classmethod
    def validate_exact_match_columns(cls, v: Dict[str, ExactColumnType]):
        reserved = {"id", "document_type", "document_id", "term", "length", "num_hits"}
        clashes = reserved.intersection(v)
        if clashes:
            raise ValueError(f"exact match columns clash with index columns: {sorted(clashes)}")
        return v

    @property
    def index_table_name(self) -> str:
        return f"{self.table_prefix}{INDEX_TABLE_SUFFIX}"

    @property
    def indexing(self) -> IndexingConfiguration:
        return IndexingConfiguration(transaction_attempts=self.transaction_attempts)

    @property
    def search(self) -> SearchConfiguration:
        return SearchConfiguration(
            idf_weight=self.idf_weight,
            tf_weight=self.tf_weight,
            deviation_weight=self.deviation_weight,
            wildcard_last_token=self.wildcard_last_token,
            require_match_for_all_tokens=self.require_match_for_all_tokens,
        )

    def ensure_data_dir(self) -> None:
        """Create the parent directory of a file-backed SQLite database."""
        prefix = "sqlite+aiosqlite:///"
        if self.database_url.startswith(prefix) and self.database_url != prefix:
            db_path = Path(self.database_url[len(prefix) :])
            if not db_path.parent.exists():
                logger.info(f"Creating data directory: {db_path.parent}")
                db_path.parent.mkdir(parents=True, exist_ok=True)
