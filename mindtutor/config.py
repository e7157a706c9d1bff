"""
Runtime settings for mindtutor.

Resolution order (later wins):
1. Field defaults (production contract: development bypasses off)
2. YAML settings file (MINDTUTOR_CONFIG, or mindtutor.yaml at project root)
3. Environment variables, including those loaded from .env
"""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from mindtutor.classroom.storage import DEFAULT_DATA_DIR
from mindtutor.utils.config_loader import load_config_file


logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent

DEFAULT_API_BASE_URL = "http://localhost:8000"

# Settings field -> environment variable
ENV_VARS = {
    "api_base_url": "MINDTUTOR_API_BASE_URL",
    "data_dir": "MINDTUTOR_DATA_DIR",
    "student_id": "MINDTUTOR_STUDENT_ID",
    "token": "MINDTUTOR_TOKEN",
    "dev_skip_auth": "MINDTUTOR_DEV_SKIP_AUTH",
    "dev_unlock_all_lessons": "MINDTUTOR_DEV_UNLOCK_ALL_LESSONS",
    "request_timeout": "MINDTUTOR_REQUEST_TIMEOUT",
}
CONFIG_ENV_VAR = "MINDTUTOR_CONFIG"


class Settings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    api_base_url: str = DEFAULT_API_BASE_URL
    data_dir: Path = DEFAULT_DATA_DIR
    student_id: str = Field("default", min_length=1)   # namespace in the local store
    token: Optional[str] = None
    dev_skip_auth: bool = False                # send generation requests without a token
    dev_unlock_all_lessons: bool = False       # ignore lesson locks in the navigator
    request_timeout: float = Field(30, gt=0)

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("token")
    @classmethod
    def empty_token_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @property
    def db_path(self) -> Path:
        return self.data_dir / "tutor.db"


def load_settings(env_file: Optional[Path] = None, config_file: Optional[Path] = None) -> Settings:
    """
    Build Settings from .env, the YAML settings file and the environment.

    Args:
        env_file: .env path (defaults to .env at project root)
        config_file: YAML settings path; overrides MINDTUTOR_CONFIG

    Returns:
        Validated Settings

    Raises:
        FileNotFoundError: If an explicitly named settings file is missing
        pydantic.ValidationError: If a value is invalid
    """
    load_dotenv(env_file or PROJECT_ROOT / ".env")

    explicit = config_file or os.environ.get(CONFIG_ENV_VAR)
    values = load_config_file(Path(explicit) if explicit else None, required=bool(explicit))

    for field, env_var in ENV_VARS.items():
        value = os.environ.get(env_var)
        if value:
            values[field] = value

    settings = Settings.model_validate(values)
    if settings.dev_skip_auth:
        logger.warning("Development auth bypass is enabled")
    if settings.dev_unlock_all_lessons:
        logger.warning("Development lesson unlock is enabled")
    return settings
