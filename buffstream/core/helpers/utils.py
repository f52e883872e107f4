import contextlib
import functools
import importlib
import logging
import pkgutil
import signal
import sys
import threading
from collections.abc import Callable, Iterator
from types import FrameType

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s:%(funcName)s] : %(message)s"

STOP_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)
if sys.platform == "win32":
    STOP_SIGNALS += (signal.SIGBREAK,)


@contextlib.contextmanager
def setup_signal_handler(stop_event: threading.Event | None = None) -> Iterator[threading.Event]:
    """
    Turn SIGINT / SIGTERM into `stop_event.set()` for the duration of the
    block, so a blocking serve loop can wait on the event instead of
    being interrupted in the middle of a socket call.

    Signals received inside the block are delivered again to the
    previous handlers on exit (a SIGINT still ends as KeyboardInterrupt).
    Outside the main thread handlers cannot be installed and the event
    is only set by the caller.
    """
    stop_event = stop_event or threading.Event()
    if threading.current_thread() is not threading.main_thread():
        yield stop_event
        return

    received: list[int] = []

    def on_signal(signum: int, frame: FrameType | None) -> None:
        logging.getLogger("core.helpers").info(f"Received {signal.Signals(signum).name}")
        received.append(signum)
        stop_event.set()

    previous = {signum: signal.signal(signum, on_signal) for signum in STOP_SIGNALS}
    try:
        yield stop_event
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)
        for signum in dict.fromkeys(reversed(received)):
            if previous[signum] is not on_signal:
                signal.raise_signal(signum)


def setup_logging(level: str | int = "WARNING") -> None:
    if isinstance(level, str):
        level = level.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)


def scan(package: str):
    """
    Decorator importing every module below `package` (recursively) right
    before the decorated function runs. Modules register themselves on
    import, e.g. commands through `CommandDispatcher.command`.
    """
    def decorator(func: Callable):

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            root = importlib.import_module(package)
            for module_info in pkgutil.walk_packages(root.__path__, prefix=f"{package}."):
                importlib.import_module(module_info.name)
            return func(*args, **kwargs)

        return wrapper

    return decorator
