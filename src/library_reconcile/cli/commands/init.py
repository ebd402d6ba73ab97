"""Client initialization for the reconciliation commands.

Each function builds an authenticated client or raises
``InitializationError`` before anything is fetched.
"""

import logging

from ...config import Config
from ...services import AmpacheClient, AmpacheError, SubsonicClient, SubsonicError

logger = logging.getLogger(__name__)

CLIENT_NAME = "library-reconcile"


class InitializationError(Exception):
    """Raised when a client cannot be created or authenticated."""

    pass


def init_subsonic(
    url: str,
    user: str,
    password: str,
    config: Config,
    password_auth: bool = False,
) -> SubsonicClient:
    """Create and authenticate a Subsonic client.

    Raises:
        InitializationError: If authentication fails
    """
    client = SubsonicClient(
        url,
        user,
        password,
        client_name=CLIENT_NAME,
        password_auth=password_auth,
        timeout=config.http_timeout,
    )
    try:
        client.authenticate()
    except SubsonicError as e:
        logger.error("Subsonic authentication failed for %s: %s", url, e)
        raise InitializationError(f"Failed to create Subsonic client: {e}") from e
    return client


def init_ampache(url: str, user: str, password: str, config: Config) -> AmpacheClient:
    """Create and authenticate an Ampache client.

    Raises:
        InitializationError: If the handshake fails
    """
    client = AmpacheClient(
        url, timeout=config.http_timeout, verbose=config.ampache_verbose
    )
    try:
        client.authenticate(user, password)
    except AmpacheError as e:
        logger.error("Ampache authentication failed for %s: %s", url, e)
        raise InitializationError(f"Failed to create Ampache client: {e}") from e
    return client
