from __future__ import annotations

import threading
from typing import Any, Callable, Optional

from storefront.logging import get_logger


class Debouncer:
    """Delay a callback until input has been quiet for ``delay_seconds``.

    Every call cancels the pending timer and starts a new one, so only the
    last call in a burst fires. ``timer_factory`` must build an object with
    ``start()`` and ``cancel()``, like threading.Timer.
    """

    def __init__(
        self,
        delay_seconds: float,
        callback: Callable[..., Any],
        timer_factory: Callable[..., Any] = threading.Timer,
    ) -> None:
        self.delay_seconds = delay_seconds
        self.callback = callback
        self.timer_factory = timer_factory
        self.logger = get_logger(__name__)
        self._lock = threading.Lock()
        self._timer: Optional[Any] = None
        self._pending: Optional[tuple[tuple, dict]] = None
        self._generation = 0

    @property
    def is_pending(self) -> bool:
        return self._timer is not None

    def call(self, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = (args, kwargs)
            self._generation += 1
            self._timer = self.timer_factory(self.delay_seconds, self._fire, args=(self._generation,))
            self._timer.start()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._pending = None

    def flush(self) -> None:
        """Run the pending call now instead of waiting for the timer."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
        self._fire()

    def _fire(self, generation: Optional[int] = None) -> None:
        with self._lock:
            # A timer that lost the race with a newer call must not fire
            if generation is not None and generation != self._generation:
                return
            pending = self._pending
            self._timer = None
            self._pending = None
        if pending is None:
            return
        args, kwargs = pending
        self.logger.debug(f"Debounced call to {getattr(self.callback, '__name__', self.callback)} firing")
        self.callback(*args, **kwargs)
