"""Persist SQL credentials entered in the settings page."""

import logging
from pathlib import Path

from dotenv import set_key

from dashboard.config import DatabaseCredentials

logger = logging.getLogger(__name__)


def save_credentials(credentials: DatabaseCredentials, path: str | Path) -> Path:
    """Write the POSTGRES_* keys to a dotenv file, keeping any other keys in it.

    The settings loader reads this file on the next start.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.touch(mode=0o600, exist_ok=True)
    for key, value in credentials.as_env().items():
        set_key(str(path), key, value, quote_mode="always")

    logger.info(
        "Saved SQL credentials for %s@%s:%s/%s to %s",
        credentials.user, credentials.host, credentials.port, credentials.database, path,
    )
    return path
