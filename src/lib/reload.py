"""
Reload plumbing: the current-presentation slot and a polling file watcher

Parsing is pure and fast, so a reload is simply a full re-parse. The slot
holds the single current Presentation:

- on success the new Presentation replaces the old one in one assignment
  under a lock, so readers see either the whole old deck or the whole new one
- on failure the previous Presentation is kept and the error is logged

FileWatch polls the deck file (mtime + size) on a daemon thread and
broadcasts an argument-less "re-parse now" signal to every subscriber.
Changes seen within the coalescing window of the last notification are
merged into it.

Usage:
    slot = PresentationSlot(Path("talk.prez"))
    slot.reload()
    watch = FileWatch(slot.path)
    watch.subscribe(slot.reload)
    watch.start()
"""

import threading
import time
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from loguru import logger

from ..config import AppSettings, appsettings
from ..models.deck import Presentation
from .log import LOG
from .parser import presentation_load

Loader = Callable[..., Presentation]
Subscriber = Callable[[], object]


class PresentationSlot:
    """
    Owner of the current Presentation, written only by reload()

    Attributes:
        path: Deck file to (re)load
        title: Title passed to the loader (defaults to the file name)
        reload_count: Number of successful loads
    """

    def __init__(
        self,
        path: Path,
        title: Optional[str] = None,
        loader: Optional[Loader] = None,
        settings: Optional[AppSettings] = None,
    ) -> None:
        self.path = Path(path)
        self.title = title
        self.loader = loader or presentation_load
        self.settings = settings or appsettings
        self.reload_count = 0
        self._presentation: Optional[Presentation] = None
        self._lock = threading.Lock()

    @property
    def current(self) -> Optional[Presentation]:
        """The current Presentation, or None before the first successful load"""
        with self._lock:
            return self._presentation

    def reload(self) -> bool:
        """
        Re-parse the deck file and swap it in on success

        Returns:
            True if the new Presentation replaced the old one, False if the
            load failed and the previous Presentation was kept
        """
        try:
            presentation = self.loader(self.path, title=self.title, settings=self.settings)
        except (SyntaxError, OSError) as e:
            kept = "keeping previous presentation" if self.current is not None else "no presentation loaded"
            logger.error(f"Failed to load presentation {self.path}: {e} ({kept})")
            return False

        with self._lock:
            self._presentation = presentation
            self.reload_count += 1
        LOG(f"Loaded presentation \"{presentation.title}\" ({len(presentation.slides)} slides)", level=1)
        return True


class FileWatch:
    """
    Polling file watcher with multi-subscriber notifications

    Attributes:
        path: File being watched
        poll_interval: Seconds between polls on the watcher thread
        coalesce: Changes within this many seconds of the previous
                  notification do not notify again
    """

    def __init__(
        self,
        path: Path,
        poll_interval: Optional[float] = None,
        coalesce: Optional[float] = None,
        settings: Optional[AppSettings] = None,
    ) -> None:
        settings = settings or appsettings
        self.path = Path(path)
        self.poll_interval = settings.watch_poll_interval if poll_interval is None else poll_interval
        self.coalesce = settings.watch_coalesce if coalesce is None else coalesce
        self.subscribers: List[Subscriber] = []
        self._signature = self.signature_get()
        self._last_notified: Optional[float] = None
        self._pending = False
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    def signature_get(self) -> Optional[Tuple[int, int]]:
        """(mtime_ns, size) of the watched file, or None if it is missing"""
        try:
            stat = self.path.stat()
        except OSError:
            return None
        return (stat.st_mtime_ns, stat.st_size)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a callback for change notifications

        Returns:
            A function that removes the subscription again
        """
        with self._lock:
            self.subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self.subscribers:
                    self.subscribers.remove(callback)

        return unsubscribe

    def notify(self) -> int:
        """
        Call every subscriber once

        A failing subscriber is logged and does not stop the others.

        Returns:
            Number of subscribers called
        """
        with self._lock:
            subscribers = list(self.subscribers)
        for callback in subscribers:
            try:
                callback()
            except Exception as e:
                logger.error(f"File watch subscriber failed: {e}")
        return len(subscribers)

    def check(self, now: Optional[float] = None) -> bool:
        """
        Poll the file once and notify subscribers if it changed

        A change inside the coalescing window stays pending and is
        delivered by the first poll after the window has passed.

        Args:
            now: Monotonic timestamp of this poll (defaults to time.monotonic())

        Returns:
            True if subscribers were notified
        """
        signature = self.signature_get()
        if signature != self._signature:
            self._signature = signature
            self._pending = True
        if not self._pending:
            return False

        now = time.monotonic() if now is None else now
        if self._last_notified is not None and now - self._last_notified < self.coalesce:
            LOG(f"Coalesced change of {self.path}", level=3)
            return False
        self._pending = False
        self._last_notified = now

        LOG(f"Presentation file {self.path} changed", level=2)
        self.notify()
        return True

    def run(self) -> None:
        while not self._stop.wait(self.poll_interval):
            self.check()

    def start(self) -> None:
        """Start polling on a daemon thread"""
        if self._thread is not None and self._thread.is_alive():
            return
        LOG(f"Setting up file watcher for {self.path}", level=2)
        self._stop.clear()
        self._thread = threading.Thread(target=self.run, name="aqaprez-filewatch", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
