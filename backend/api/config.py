import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DATA_DIR = PROJECT_ROOT / "data"

ENV_PREFIX = "QUOTE_INTAKE_"


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    db_path: str = str(DATA_DIR / "quote_intake.db")
    matching_profile: str = "inline"
    cors_origins: list[str] = ["http://localhost:5173"]
    log_level: str = "INFO"


def load_settings(environ: dict | None = None) -> Settings:
    """Read QUOTE_INTAKE_* variables once at startup."""
    env = os.environ if environ is None else environ
    values = {}
    if env.get(f"{ENV_PREFIX}DB_PATH"):
        values["db_path"] = env[f"{ENV_PREFIX}DB_PATH"]
    if env.get(f"{ENV_PREFIX}MATCHING_PROFILE"):
        values["matching_profile"] = env[f"{ENV_PREFIX}MATCHING_PROFILE"]
    if env.get(f"{ENV_PREFIX}CORS_ORIGINS"):
        values["cors_origins"] = [
            origin.strip()
            for origin in env[f"{ENV_PREFIX}CORS_ORIGINS"].split(",")
            if origin.strip()
        ]
    if env.get(f"{ENV_PREFIX}LOG_LEVEL"):
        values["log_level"] = env[f"{ENV_PREFIX}LOG_LEVEL"].upper()
    return Settings(**values)
