from __future__ import annotations

import threading
from typing import Any, Callable, Optional

from storefront.api.errors import ApiError
from storefront.config import get_config
from storefront.data.interface import StorefrontApi
from storefront.data.util import get_storefront_api
from storefront.logging import get_logger

MISSING_TOKEN_MESSAGE = "Authentication token is missing. Please log in again."


class Provider:
    """In-memory state holder a UI listens to.

    Owns its lists, an ``is_loading`` flag and the last error message. Every
    network call goes through ``_run`` or ``_load``: the error is cleared
    before the call, any ApiError is turned into ``error``, and listeners are
    notified on entry and exit. ``is_loading`` stays set while any call is in
    flight, including calls made from a debounce timer thread.
    """
    requires_token = False

    def __init__(self, api: Optional[StorefrontApi] = None) -> None:
        self.api = api or get_storefront_api()
        self.config = get_config()
        self.logger = get_logger(type(self).__module__)
        self.is_loading = False
        self.error: Optional[str] = None
        self._listeners: list[Callable[[], None]] = []
        self._lock = threading.RLock()
        self._in_flight = 0
        self._generations: dict[str, int] = {}

    # ---------- listeners ----------

    def add_listener(self, listener: Callable[[], None]) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Callable[[], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def notify_listeners(self) -> None:
        for listener in list(self._listeners):
            listener()

    # ---------- error state ----------

    def clear_error(self) -> None:
        self.error = None
        self.notify_listeners()

    def _fail(self, message: str) -> bool:
        """Record a locally detected failure without touching the network."""
        self.error = message
        self.logger.warning(message)
        self.notify_listeners()
        return False

    # ---------- call wrappers ----------

    def _token_missing(self) -> bool:
        if self.requires_token and not self.api.has_token:
            self._fail(MISSING_TOKEN_MESSAGE)
            return True
        return False

    def _begin(self, clear_error: bool = True) -> None:
        with self._lock:
            self._in_flight += 1
            self.is_loading = True
            if clear_error:
                self.error = None
        self.notify_listeners()

    def _end(self) -> None:
        with self._lock:
            self._in_flight -= 1
            self.is_loading = self._in_flight > 0
        self.notify_listeners()

    def _record_error(self, label: str, e: ApiError) -> None:
        self.error = f"{label}: {e.message}"
        self.logger.warning(f"{label} (status={e.status_code}, code={e.error_code}): {e.message}")

    def _run(self, label: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run one API call; returns its result, or None after recording the error."""
        if self._token_missing():
            return None
        self._begin()
        try:
            return fn(*args, **kwargs)
        except ApiError as e:
            with self._lock:
                self._record_error(label, e)
            return None
        finally:
            self._end()

    def _write(self, label: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> bool:
        return self._run(label, fn, *args, **kwargs) is not None

    def _load(
        self,
        key: str,
        label: str,
        fetch: Callable[[], Any],
        store: Callable[[Any], None],
        quiet: bool = False,
    ) -> bool:
        """Fetch and store the latest result for ``key``.

        Loads sharing a key are numbered; when a newer one has started by the
        time a fetch returns, its result (or error) is dropped. A ``quiet`` load
        is a refresh after a successful write: its failure is only logged.
        """
        if self._token_missing():
            return False
        with self._lock:
            generation = self._generations.get(key, 0) + 1
            self._generations[key] = generation
        self._begin(clear_error=not quiet)
        try:
            result = fetch()
        except ApiError as e:
            with self._lock:
                if self._generations[key] != generation:
                    self.logger.debug(f"{label}: dropping error from an overtaken request")
                elif quiet:
                    self.logger.warning(f"{label} (status={e.status_code}, code={e.error_code}): {e.message}")
                else:
                    self._record_error(label, e)
            return False
        else:
            with self._lock:
                if self._generations[key] != generation:
                    self.logger.debug(f"{label}: dropping result of an overtaken request")
                    return False
                store(result)
            return True
        finally:
            self._end()
