from __future__ import annotations

import atexit
from collections.abc import Callable
import signal
import sys
import threading
from typing import Any, Protocol

from rich.console import Console, RenderableType

INTERRUPTED_EXIT_CODE = 130


def _once(callback: Callable[[], None]) -> Callable[[], None]:
    lock = threading.Lock()
    called = False

    def wrapper() -> None:
        nonlocal called
        with lock:
            if called:
                return
            called = True
        callback()

    return wrapper


class Lifecycle(Protocol):
    def on_normal_exit(self, callback: Callable[[], None]) -> None: ...
    def on_interrupt(self, callback: Callable[[], None]) -> None: ...


class ProcessLifecycle(Lifecycle):
    """Shutdown hooks of the running interpreter.

    ``on_normal_exit`` rides on ``atexit``. ``on_interrupt`` replaces the
    SIGINT handler, which Python only allows from the main thread; elsewhere
    the interrupt hook is skipped and the exit hook still fires.
    """

    def on_normal_exit(self, callback: Callable[[], None]) -> None:
        atexit.register(_once(callback))

    def on_interrupt(self, callback: Callable[[], None]) -> None:
        if threading.current_thread() is not threading.main_thread():
            return
        guarded = _once(callback)

        def handler(signum: int, frame: Any) -> None:
            guarded()

        signal.signal(signal.SIGINT, handler)


class DeferredEmitter:
    def __init__(
        self, console: Console | None = None, lifecycle: Lifecycle | None = None
    ) -> None:
        self._console = console or Console(stderr=True)
        self._lifecycle = lifecycle or ProcessLifecycle()

    @property
    def console(self) -> Console:
        return self._console

    def emit(self, renderable: RenderableType, *, defer: bool = True) -> None:
        if not defer:
            self._console.print(renderable)
            return

        self._lifecycle.on_normal_exit(lambda: self._console.print(renderable))
        self._lifecycle.on_interrupt(self._exit_on_interrupt)

    def _exit_on_interrupt(self) -> None:
        self._console.print("")
        sys.exit(INTERRUPTED_EXIT_CODE)
