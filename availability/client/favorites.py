"""
Optimistic favorites for one client session.

A toggle flips the local membership at once and confirms it with the
server afterwards.  While the request is in flight the ward is *pending*
and further toggles of the same ward are rejected; other wards stay free
to change.  When the server refuses, only the toggled ward is put back
the way it was.

"Already a favorite" on add and "not a favorite" on remove both mean the
server is in the requested state, so they count as success.
"""
from __future__ import annotations

import enum
import logging
from typing import Callable, Iterable, Optional

from .remote import FavoriteConflict, FavoritesRemote, RemoteError

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Failed to update favorites"

SuccessCallback = Callable[[str, bool], None]
ErrorCallback = Callable[[str, str], None]


class ToggleOutcome(enum.Enum):
    APPLIED = "applied"
    ROLLED_BACK = "rolled_back"
    REJECTED = "rejected"


class FavoritesStore:
    """Favorite ward names of the signed-in user.

    Args:
        remote: Server operations.
        on_success: Called with ``(ward_name, is_favorite)`` after a confirmed toggle.
        on_error: Called with ``(ward_name, message)`` after a rollback.
    """

    def __init__(
        self,
        remote: FavoritesRemote,
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ):
        self.remote = remote
        self.on_success = on_success
        self.on_error = on_error
        self._favorites: set[str] = set()
        self._pending: set[str] = set()

    @property
    def favorites(self) -> frozenset[str]:
        return frozenset(self._favorites)

    @property
    def pending_wards(self) -> frozenset[str]:
        return frozenset(self._pending)

    def is_favorite(self, ward_name: str) -> bool:
        return ward_name in self._favorites

    def is_pending(self, ward_name: str) -> bool:
        return ward_name in self._pending

    def add_local(self, ward_names: Iterable[str]) -> None:
        self._favorites.update(ward_names)

    def remove_local(self, ward_names: Iterable[str]) -> None:
        self._favorites.difference_update(ward_names)

    async def load(self) -> None:
        """Replace the local set with the server's list.

        Wards with a toggle in flight keep their optimistic state.
        """
        names = set(await self.remote.list_favorite_ward_names())
        for ward_name in self._pending:
            if ward_name in self._favorites:
                names.add(ward_name)
            else:
                names.discard(ward_name)
        self._favorites = names

    async def toggle(self, ward_name: str) -> ToggleOutcome:
        if ward_name in self._pending:
            return ToggleOutcome.REJECTED

        was_favorite = ward_name in self._favorites
        self._set(ward_name, not was_favorite)
        self._pending.add(ward_name)
        try:
            if was_favorite:
                await self.remote.remove_favorite(ward_name)
            else:
                try:
                    await self.remote.add_favorite(ward_name)
                except FavoriteConflict:
                    pass
        except RemoteError as exc:
            self._set(ward_name, was_favorite)
            logger.warning("Favorite toggle for %r rolled back: %s", ward_name, exc)
            if self.on_error:
                self.on_error(ward_name, exc.message or DEFAULT_ERROR_MESSAGE)
            return ToggleOutcome.ROLLED_BACK
        except BaseException:
            self._set(ward_name, was_favorite)
            raise
        finally:
            self._pending.discard(ward_name)

        if self.on_success:
            self.on_success(ward_name, not was_favorite)
        return ToggleOutcome.APPLIED

    def close(self) -> None:
        """Forget everything; called on sign-out."""
        self._favorites.clear()
        self._pending.clear()

    def _set(self, ward_name: str, member: bool) -> None:
        if member:
            self._favorites.add(ward_name)
        else:
            self._favorites.discard(ward_name)
