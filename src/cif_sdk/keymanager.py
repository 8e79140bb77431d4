"""API token storage using the system keychain."""

from __future__ import annotations

import logging
import os

import keyring

logger = logging.getLogger(__name__)

SERVICE_NAME = "cif-sdk"
TOKEN_ENTRY = "token"
TOKEN_ENV = "CIF_TOKEN"


def get_token() -> str | None:
    """Retrieve the API token from the environment or keychain.

    Order of precedence:
    1. ``CIF_TOKEN`` environment variable (for CI/containers)
    2. System keychain
    """
    env_value = os.environ.get(TOKEN_ENV)
    if env_value:
        return env_value

    try:
        value: str | None = keyring.get_password(SERVICE_NAME, TOKEN_ENTRY)
        if value:
            return value
    except keyring.errors.KeyringError as e:
        logger.warning(f"Keyring error retrieving token: {e}")

    return None


def set_token(value: str) -> bool:
    """Store the API token in the system keychain."""
    if not value or not value.strip():
        logger.error("Refusing to store empty token")
        return False

    try:
        keyring.set_password(SERVICE_NAME, TOKEN_ENTRY, value.strip())
        logger.info("Stored token in system keychain")
        return True
    except keyring.errors.KeyringError as e:
        logger.error(f"Failed to store token: {e}")
        return False


def delete_token() -> bool:
    """Remove the API token from the system keychain."""
    try:
        keyring.delete_password(SERVICE_NAME, TOKEN_ENTRY)
        logger.info("Deleted token from system keychain")
        return True
    except keyring.errors.KeyringError as e:
        logger.warning(f"Failed to delete token: {e}")
        return False


def token_source() -> str | None:
    """Where the token would be loaded from: "environment", "keychain" or None."""
    if os.environ.get(TOKEN_ENV):
        return "environment"
    try:
        if keyring.get_password(SERVICE_NAME, TOKEN_ENTRY) is not None:
            return "keychain"
    except keyring.errors.KeyringError:
        pass
    return None
