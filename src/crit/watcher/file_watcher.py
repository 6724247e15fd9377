"""Background file system watcher."""

import asyncio
import logging
import os
from pathlib import Path, PurePath
from typing import Callable, Optional, Set

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from ..config import CritConfig
from ..models import WatchEvent, WatchEventType

logger = logging.getLogger(__name__)

WatchCallback = Callable[[WatchEvent], None]


class _WatchdogAdapter(FileSystemEventHandler):
    """Forward content-changing watchdog notifications to a ProjectWatcher."""

    def __init__(self, watcher: "ProjectWatcher"):
        self.watcher = watcher

    def on_created(self, event: FileSystemEvent) -> None:
        self._forward(event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._forward(event)

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._forward(event)

    def on_moved(self, event: FileSystemEvent) -> None:
        self._forward(event)
        dest_path = getattr(event, "dest_path", None)
        if dest_path and not event.is_directory:
            self.watcher.notify_threadsafe(os.fsdecode(dest_path))

    def _forward(self, event: FileSystemEvent) -> None:
        # Skip directory events
        if event.is_directory:
            return
        self.watcher.notify_threadsafe(os.fsdecode(event.src_path))


class ProjectWatcher:
    """
    Recursive file system watcher for one project directory.

    PATTERN: Cold scan seeds the seen set, then watchdog drives live events
    CRITICAL: Events are classified and delivered on the event loop thread
    GOTCHA: No callback may fire once stop() has returned
    """

    def __init__(
        self,
        root_path: str | Path,
        callback: WatchCallback,
        config: Optional[CritConfig] = None,
    ):
        """
        Initialize watcher.

        Args:
            root_path: Directory to watch
            callback: Receives every classified event
            config: Extension and ignored-directory settings
        """
        config = config or CritConfig()
        self.root_path = Path(root_path).resolve()
        self.callback = callback
        self.watched_extensions: Set[str] = set(config.watched_extensions)
        self.ignored_dirs: Set[str] = set(config.ignored_dirs)

        self._seen: Set[str] = set()
        self._observer: Optional[Observer] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._started = False
        self._stopped = False

    @property
    def is_running(self) -> bool:
        """Check if live events are being observed."""
        return self._observer is not None and not self._stopped

    @property
    def seen_count(self) -> int:
        return len(self._seen)

    def should_watch(self, relative_path: str) -> bool:
        """
        Check whether a project-relative path produces events.

        Args:
            relative_path: Path relative to the project root

        Returns:
            False if any component is an ignored directory or the
            extension is not monitored
        """
        path = PurePath(relative_path)
        for part in path.parts:
            if part in self.ignored_dirs:
                return False
        return path.suffix in self.watched_extensions

    async def start(self) -> None:
        """Scan existing files, then begin observing live changes."""
        if self._started:
            logger.warning("Watcher already started")
            return
        self._started = True
        self._loop = asyncio.get_running_loop()

        await self._loop.run_in_executor(None, self._cold_scan)
        logger.debug(f"Cold scan found {len(self._seen)} files in {self.root_path}")

        if self._stopped:
            return

        try:
            observer = Observer()
            observer.schedule(_WatchdogAdapter(self), str(self.root_path), recursive=True)
            observer.start()
        except (OSError, RuntimeError) as e:
            # Recursive watching unavailable; keep the cold scan results only
            logger.error(f"Failed to create watcher for {self.root_path}: {e}")
            return

        self._observer = observer
        logger.info(f"Started watching: {self.root_path}")

    def stop(self) -> None:
        """Stop watching. Safe to call more than once."""
        if self._stopped:
            return
        self._stopped = True

        observer = self._observer
        self._observer = None
        if observer is not None:
            try:
                observer.stop()
                observer.join(timeout=5)
            except RuntimeError as e:
                logger.warning(f"Error stopping observer: {e}")
            logger.info("Stopped watching")

    def _cold_scan(self) -> None:
        """Record existing matching files, skipping unreadable directories."""
        stack = [str(self.root_path)]

        while stack:
            if self._stopped:
                return
            directory = stack.pop()
            try:
                with os.scandir(directory) as entries:
                    for entry in entries:
                        if entry.is_dir(follow_symlinks=False):
                            if entry.name not in self.ignored_dirs:
                                stack.append(entry.path)
                        elif entry.is_file():
                            relative = os.path.relpath(entry.path, self.root_path)
                            if self.should_watch(relative):
                                self._seen.add(entry.path)
            except OSError as e:
                # Directory may not exist or be inaccessible
                logger.debug(f"Skipping unreadable directory {directory}: {e}")

    def notify_threadsafe(self, full_path: str) -> None:
        """Hand a native notification over to the event loop thread."""
        loop = self._loop
        if self._stopped or loop is None:
            return
        try:
            loop.call_soon_threadsafe(self.handle_path, full_path)
        except RuntimeError:
            # Event loop already closed
            logger.debug(f"Dropped notification for {full_path}")

    def handle_path(self, full_path: str) -> Optional[WatchEvent]:
        """
        Classify one notified path and deliver the event.

        Args:
            full_path: Absolute path reported by the observer

        Returns:
            The delivered event, or None if the notification was ignored
        """
        if self._stopped:
            return None

        try:
            relative = Path(full_path).relative_to(self.root_path).as_posix()
        except ValueError:
            return None

        if not self.should_watch(relative):
            return None

        if os.path.isfile(full_path):
            is_new = full_path not in self._seen
            self._seen.add(full_path)
            event_type = WatchEventType.ADD if is_new else WatchEventType.CHANGE
        elif os.path.exists(full_path):
            return None
        elif full_path in self._seen:
            self._seen.discard(full_path)
            event_type = WatchEventType.UNLINK
        else:
            return None

        event = WatchEvent(type=event_type, path=relative)
        self.callback(event)
        return event

    def get_status(self) -> dict:
        """Get watcher status."""
        return {
            "running": self.is_running,
            "root_path": str(self.root_path),
            "tracked_files": len(self._seen),
            "ignored_dirs": len(self.ignored_dirs),
        }
