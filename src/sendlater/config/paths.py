from pathlib import Path
from typing import Literal

from platformdirs import PlatformDirs
from pydantic import BaseModel, Field, field_validator

_dirs = PlatformDirs("sendlater", "sendlater")
DEFAULT_DB_PATHS = {
    "dev": "db.dev.sqlite",
    "test": "memory",
    "prod": "db.sqlite",
}


class PathConfig(BaseModel):
    """
    Paths used by sendlater
    """

    db: Path | Literal["memory"] = Path(DEFAULT_DB_PATHS["dev"])
    """
    Defaults:

    - `prod`: db.sqlite
    - `dev`: db.dev.sqlite
    - `test`: memory

    if "memory", use an in-memory sqlite database
    """
    logs: Path = Field(
        default=Path(_dirs.user_log_dir),
        description="""
    Directory where logs are stored.
    """,
    )

    @property
    def sqlite(self) -> str:
        """the path to the sqlite database with the sqlite:// prefix"""
        if self.db == "memory":
            return "sqlite://"
        else:
            return f"sqlite:///{str(self.db.resolve())}"

    @field_validator("db", mode="before")
    @classmethod
    def memory_or_path(cls, value: str | Path) -> Path | Literal["memory"]:
        if value == "memory":
            return value
        return Path(value)

    @field_validator("logs", mode="after")
    @classmethod
    def create_dir(cls, value: Path) -> Path:
        """Ensure directories exist"""
        value.mkdir(parents=True, exist_ok=True)
        return value

    @field_validator("db", mode="after")
    @classmethod
    def create_parent_dir(cls, value: Path | Literal["memory"]) -> Path | Literal["memory"]:
        """Ensure parent directory exists"""
        if value != "memory":
            value.parent.mkdir(exist_ok=True, parents=True)
        return value
