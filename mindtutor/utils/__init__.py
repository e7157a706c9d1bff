"""mindtutor utilities."""

from .config_loader import load_config_file, CONFIG_FILE

__all__ = [
    "load_config_file",
    "CONFIG_FILE",
]
