from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Loader settings.

    Optional:
      - DATABASE_URL: Chado database to read from, or database sink target
      - DB_SCHEMA: used for prefixing table names in raw SQL: "{schema}.{table}"
      - PUBLICATION_LOOKUP: "off", "fail" (lookup errors abort the run) or
        "skip" (lookup errors are logged and the publication is left as is)
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: Optional[str] = None
    db_schema: Optional[str] = None

    # NCBI Entrez
    entrez_email: str = Field(
        default="legfed-admin@ncgr.org",
        validation_alias="ENTREZ_EMAIL",
        description="Contact address sent with every Entrez request",
    )
    entrez_api_key: Optional[str] = Field(
        default=None,
        validation_alias="ENTREZ_API_KEY",
    )
    publication_lookup: Literal["off", "fail", "skip"] = Field(
        default="off",
        validation_alias="PUBLICATION_LOOKUP",
    )

    # Sequence names containing any of these are loaded as supercontigs
    supercontig_patterns: list[str] = Field(
        default_factory=lambda: ["scaffold", "contig"],
        validation_alias="SUPERCONTIG_PATTERNS",
    )

    log_dir: Optional[str] = None
    log_level: str = "INFO"


settings = Settings()
