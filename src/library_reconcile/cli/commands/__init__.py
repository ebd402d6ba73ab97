"""CLI command modules."""

from .init import InitializationError, init_ampache, init_subsonic
from .itunes2ampache import itunes2ampache_command
from .itunes2subsonic import itunes2subsonic_command
from .subsonic2subsonic import subsonic2subsonic_command

__all__ = [
    "InitializationError",
    "init_ampache",
    "init_subsonic",
    "itunes2ampache_command",
    "itunes2subsonic_command",
    "subsonic2subsonic_command",
]
