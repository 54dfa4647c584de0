import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import AbsencePolicy, OrphanRecordPolicy

BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    env: str = Field(default="dev", description="Deployment environment")
    app_name: str = "RH Master Payroll"
    database_url: str | None = Field(
        default=None,
        description="Remote mirror connection string; unset means local-only operation",
    )
    create_schema: bool = False
    local_store_path: Path = Field(default=BASE_DIR / "data" / "rh_master.json")
    export_dir: Path = Field(default=BASE_DIR / "exports")
    absence_policy: AbsencePolicy = AbsencePolicy.PRORATED_DAYS
    orphan_policy: OrphanRecordPolicy = OrphanRecordPolicy.TOLERATE
    missing_value: str = "N/A"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="RHMASTER_", extra="ignore")

    @field_validator("database_url", mode="before")
    @classmethod
    def blank_url_is_none(cls, value: str | None) -> str | None:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("log_level")
    @classmethod
    def normalize_level(cls, value: str) -> str:
        return value.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(_env_file=get_settings_env_file())


def get_settings_env_file() -> str | None:
    """Resolve environment-specific env file if it exists."""
    env = os.getenv("RHMASTER_ENV", "dev")
    env_file = BASE_DIR / f".env.{env}"
    default_file = BASE_DIR / ".env"
    if env_file.exists():
        return str(env_file)
    if default_file.exists():
        return str(default_file)
    return None
