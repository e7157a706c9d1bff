"""
Config file loader for mindtutor.

Loads the optional YAML settings file (flat mapping of Settings fields).
"""

from pathlib import Path
from typing import Any
import yaml


# Default settings file location (relative to project root)
CONFIG_FILE = Path(__file__).parent.parent.parent / "mindtutor.yaml"


def load_config_file(path: Path | None = None, required: bool = False) -> dict[str, Any]:
    """
    Load a YAML settings file.

    Args:
        path: Settings file path (defaults to mindtutor.yaml at project root)
        required: Raise if the file does not exist instead of returning {}

    Returns:
        Dict of settings values, e.g.:
        - api_base_url: backend base URL
        - data_dir: directory holding tutor.db
        - student_id, token, request_timeout
        - dev_skip_auth, dev_unlock_all_lessons

    Raises:
        FileNotFoundError: If required and the file doesn't exist
        ValueError: If the top level is not a mapping
        yaml.YAMLError: If YAML parsing fails
    """
    file_path = Path(path) if path else CONFIG_FILE

    if not file_path.exists():
        if required:
            raise FileNotFoundError(f"Config file not found: {file_path}")
        return {}

    with open(file_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {file_path}")
    return data
