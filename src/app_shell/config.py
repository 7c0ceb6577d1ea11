import logging
import os
from pathlib import Path

from src.rules.models import Rules

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Operational configuration that prevents startup."""


def validate_ops_rules(rules: Rules, data_dir: Path) -> None:
    """
    Validate operational requirements before startup.

    Raises ConfigError when required environment variables are unset or the
    data directory cannot be created or written.
    """
    missing = [name for name in rules.ops.required_env if name not in os.environ]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    try:
        data_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigError(f"Cannot create data directory {data_dir}: {e}") from e
    if not os.access(data_dir, os.W_OK):
        raise ConfigError(f"Data directory is not writable: {data_dir}")

    logger.info("Configuration validated (data dir %s)", data_dir)
