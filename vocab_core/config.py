"""
Configuration - environment-driven settings.

Environment variables are read through python-dotenv so a local `.env`
file works the same way as exported variables.
"""

from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from vocab_core.srs.errors import ConfigurationError
from vocab_core.srs.settings import SRSSettings

# Load environment
load_dotenv()

DEFAULT_DATABASE_URL = "sqlite:///logs/srs.db"
PROD_DB_NAME = "srs"
TEST_DB_NAME = "test_srs"

# Environment variable -> (settings field, parser)
SETTINGS_ENV_VARS = {
    "SRS_INITIAL_EASE": ("initial_ease_factor", float),
    "SRS_MIN_EASE": ("min_ease_factor", float),
    "SRS_MAX_EASE": ("max_ease_factor", float),
    "SRS_INITIAL_INTERVAL": ("initial_interval", int),
    "SRS_MAX_INTERVAL": ("max_interval", int),
}


def is_test_mode() -> bool:
    """Check if running in test mode."""
    return os.getenv("TEST_MODE", "false").lower() == "true"


def get_database_url() -> str:
    """
    Get the record store URL from environment variables.

    In test mode the production database name is swapped for the test one,
    so `sqlite:///logs/srs.db` becomes `sqlite:///logs/test_srs.db` and
    `postgresql://user:pw@host/srs` becomes `postgresql://user:pw@host/test_srs`.

    Returns:
        SQLAlchemy connection string
    """
    base_url = os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL
    if is_test_mode():
        head, sep, tail = base_url.rpartition("/")
        if tail.startswith(PROD_DB_NAME):
            return head + sep + TEST_DB_NAME + tail[len(PROD_DB_NAME):]
    return base_url


def get_default_user_id() -> str:
    """Get default user id for scoping review data."""
    return os.getenv("DEFAULT_USER_ID", "default")


def get_mongo_uri() -> Optional[str]:
    """Get the Mongo connection string for the word catalogue, if configured."""
    return os.getenv("MONGO_URI")


def get_mongo_db_name() -> str:
    return os.getenv("MONGO_DB_NAME", "vocabulary")


def load_settings() -> SRSSettings:
    """
    Build scheduler settings from SRS_* environment variables.

    Unset or blank variables fall back to the defaults.

    Returns:
        Validated SRSSettings

    Raises:
        ConfigurationError: if a variable cannot be parsed or the resulting
            settings are inconsistent (e.g. min ease above max ease)
    """
    values = {}
    for env_name, (field_name, parse) in SETTINGS_ENV_VARS.items():
        raw = os.getenv(env_name)
        if raw is None or raw.strip() == "":
            continue
        try:
            values[field_name] = parse(raw)
        except ValueError as exc:
            raise ConfigurationError(
                f"{env_name}={raw!r} is not a valid {parse.__name__}"
            ) from exc

    try:
        return SRSSettings(**values)
    except ValidationError as exc:
        raise ConfigurationError(str(exc)) from exc
