"""
Debounced ward search.

Typing fires :meth:`WardSearch.submit` on every keystroke; a fetch starts
only after the text has been quiet for the debounce delay.  Fetches that
are already running are not cancelled, so responses may arrive out of
order.  Each fetch is numbered and a response older than the last one
delivered is dropped.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from .config import ClientConfig
from .remote import RemoteError

logger = logging.getLogger(__name__)

Fetch = Callable[[Optional[str]], Awaitable[Any]]
ResultCallback = Callable[[Optional[str], Any], None]
ErrorCallback = Callable[[Optional[str], RemoteError], None]


class ResponseSequencer:
    """Hands out increasing request numbers and accepts only newer responses."""

    def __init__(self):
        self._issued = 0
        self._applied = 0

    @property
    def last_applied(self) -> int:
        return self._applied

    def next(self) -> int:
        self._issued += 1
        return self._issued

    def accept(self, seq: int) -> bool:
        if seq <= self._applied:
            return False
        self._applied = seq
        return True


class WardSearch:
    """Debounce search text and deliver only the freshest result.

    Args:
        fetch: Coroutine function called with the search text (None for empty).
        on_result: Called with ``(search_text, result)`` for each accepted response.
        debounce_ms: Quiet time before fetching; taken from :class:`ClientConfig` when omitted.
        on_error: Called with ``(search_text, error)`` when the freshest fetch fails.
    """

    def __init__(
        self,
        fetch: Fetch,
        on_result: ResultCallback,
        debounce_ms: Optional[int] = None,
        on_error: Optional[ErrorCallback] = None,
    ):
        self.fetch = fetch
        self.on_result = on_result
        self.on_error = on_error
        if debounce_ms is None:
            debounce_ms = ClientConfig().search_debounce_ms
        self.delay = debounce_ms / 1000
        self.sequencer = ResponseSequencer()
        self._timer: Optional[asyncio.Task] = None
        self._inflight: set[asyncio.Task] = set()

    def submit(self, text: Optional[str]) -> None:
        """Restart the debounce timer for ``text``; must run inside an event loop."""
        text = (text or "").strip() or None
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = asyncio.get_running_loop().create_task(self._after_quiet(text))

    async def _after_quiet(self, text: Optional[str]) -> None:
        await asyncio.sleep(self.delay)
        # Runs on its own so a later keystroke cannot cancel it
        task = asyncio.get_running_loop().create_task(self._run(self.sequencer.next(), text))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _run(self, seq: int, text: Optional[str]) -> None:
        try:
            result = await self.fetch(text)
        except RemoteError as exc:
            if self.sequencer.accept(seq):
                logger.warning("Search for %r failed: %s", text, exc)
                if self.on_error:
                    self.on_error(text, exc)
            return
        if not self.sequencer.accept(seq):
            logger.debug("Dropped out-of-order search response %d for %r", seq, text)
            return
        self.on_result(text, result)

    async def drain(self) -> None:
        """Wait for the pending timer and every running fetch."""
        if self._timer is not None:
            await asyncio.wait({self._timer})
        while self._inflight:
            await asyncio.gather(*list(self._inflight))
