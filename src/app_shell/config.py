import logging
import os
import sys
from pathlib import Path

from src.rules.models import Rules

logger = logging.getLogger(__name__)


def validate_ops_rules(rules: Rules, data_dir: Path) -> None:
    """
    Validate operational requirements before startup.

    Exits the process when a requirement is not met.
    """
    # 1. Required env
    missing = [env_var for env_var in rules.ops.required_env if env_var not in os.environ]
    if missing:
        logger.critical("Missing required environment variables: %s", ", ".join(missing))
        sys.exit(1)

    # 2. Data dir must exist and be writable for the SQLite file
    try:
        data_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.critical("Data dir %s cannot be created: %s", data_dir, e)
        sys.exit(1)
    if not os.access(data_dir, os.W_OK):
        logger.critical("Data dir %s is not writable", data_dir)
        sys.exit(1)

    # 3. Plan catalogue must back the access rules
    if not rules.plans:
        logger.warning("No plans configured; no subscription will entitle premium content")

    logger.info("Configuration validated.")
