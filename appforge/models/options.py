"""Resolved options for one scaffold run."""
import re
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Database(str, Enum):
    """Database backends the generator knows how to configure."""

    SQLITE3 = "sqlite3"
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"


class Options(BaseModel):
    """Validated, immutable configuration for a single run."""

    model_config = ConfigDict(extra='forbid', frozen=True)

    target: Path
    database: Database = Database.SQLITE3
    force: bool = False
    extra_dependencies: Tuple[str, ...] = Field(default_factory=tuple, description="Extra gems, in order")
    deploy_target: Optional[str] = Field(None, description="Heroku app name to deploy to")
    strict: bool = Field(False, description="Exit non-zero when a provisioning step fails")
    dry_run: bool = False

    @field_validator('target')
    @classmethod
    def validate_target(cls, v: Path) -> Path:
        """Reject paths that can't name a project and resolve to an absolute path."""
        if not re.search(r'[A-Za-z0-9]', Path(v).name):
            raise ValueError("Target path must name a new project directory")
        return Path(v).expanduser().absolute()

    @field_validator('extra_dependencies')
    @classmethod
    def validate_dependencies(cls, v):
        """Validate gem names, dropping repeats but keeping the first one."""
        seen = []
        for name in v:
            name = name.strip()
            if not re.match(r'^[A-Za-z0-9_.\-]+$', name):
                raise ValueError(f"'{name}' is not a valid gem name")
            if name not in seen:
                seen.append(name)
        return tuple(seen)

    @field_validator('deploy_target')
    @classmethod
    def validate_deploy_target(cls, v):
        """Validate Heroku app names."""
        if v is None:
            return v
        if not re.match(r'^[a-z][a-z0-9\-]{2,29}$', v):
            raise ValueError(
                f"Deploy target '{v}' must be 3-30 lowercase letters, digits or dashes, "
                "starting with a letter"
            )
        return v

    @property
    def target_path(self) -> Path:
        return self.target

    @property
    def app_name(self) -> str:
        """Base name of the project directory."""
        return self.target.name
