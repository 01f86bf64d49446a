"""Asynchronous client for the bed availability API.

:class:`FavoritesStore` keeps a session's favorite wards with optimistic
updates; :class:`WardSearch` debounces ward searches and drops responses
that arrive out of order.
"""
from .config import ClientConfig
from .favorites import FavoritesStore, ToggleOutcome
from .remote import FavoriteConflict, FavoritesRemote, HttpFavoritesRemote, RemoteError
from .search import ResponseSequencer, WardSearch

__all__ = [
    'ClientConfig',
    'FavoriteConflict',
    'FavoritesRemote',
    'FavoritesStore',
    'HttpFavoritesRemote',
    'RemoteError',
    'ResponseSequencer',
    'ToggleOutcome',
    'WardSearch',
]
