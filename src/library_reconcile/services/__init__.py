"""Library services: file exports and remote music servers."""

from .ampache_service import AmpacheClient, AmpacheError, AmpacheLibrary
from .created_sql import write_created_sql
from .itunes_library import ItunesLibrary
from .subsonic_service import SubsonicClient, SubsonicError, SubsonicLibrary

__all__ = [
    "AmpacheClient",
    "AmpacheError",
    "AmpacheLibrary",
    "ItunesLibrary",
    "SubsonicClient",
    "SubsonicError",
    "SubsonicLibrary",
    "write_created_sql",
]
