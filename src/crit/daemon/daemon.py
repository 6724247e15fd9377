"""The crit daemon: watcher, batcher, classifier and analyzers wired together."""

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from ..config import CritConfig, load_config
from ..models import AnalysisResult, ChangeAction, ProcessResult, WatchEvent
from ..watcher import ChangeBatcher, ProjectWatcher, process_batch
from .analyzer import analyze_changes
from .reporter import record_actions, report_actions

logger = logging.getLogger(__name__)

EventCallback = Callable[[WatchEvent], None]
ActionsCallback = Callable[[List[ProcessResult]], None]
CriticismsCallback = Callable[[int], None]


class CritDaemon:
    """
    Background watcher that turns file changes into criticisms.

    PATTERN: watcher -> batcher -> classifier (report + history) -> analyzers
    CRITICAL: Everything runs on one event loop; watchdog threads only notify
    GOTCHA: Batch failures are logged and never stop the daemon
    """

    def __init__(
        self,
        project_root: Union[str, Path],
        config: Optional[CritConfig] = None,
        on_event: Optional[EventCallback] = None,
        on_actions: Optional[ActionsCallback] = None,
        on_criticisms: Optional[CriticismsCallback] = None,
    ):
        """
        Initialize daemon.

        Args:
            project_root: Project directory to watch
            config: Settings (default: loaded from the project)
            on_event: Called for every watch event as it arrives
            on_actions: Called with the significant actions of each batch
            on_criticisms: Called with the number of criticisms a batch produced
        """
        self.project_root = Path(project_root).resolve()
        self.config = config or load_config(self.project_root)
        self.on_event = on_event
        self.on_actions = on_actions
        self.on_criticisms = on_criticisms

        self.batcher = ChangeBatcher(self.config.debounce_seconds, handler=self.handle_batch)
        self.watcher = ProjectWatcher(self.project_root, self._on_watch_event, self.config)
        self.batches_processed = 0

    @property
    def is_running(self) -> bool:
        return self.watcher.is_running

    async def start(self) -> None:
        """Cold-scan the project and start watching."""
        await self.watcher.start()
        if self.watcher.is_running:
            logger.info(f"Watching {self.project_root}")
        else:
            logger.warning(f"Live watching unavailable for {self.project_root}")

    def stop(self) -> None:
        """Discard queued changes and stop watching. Safe to call twice."""
        self.batcher.close()
        self.watcher.stop()
        logger.info("Daemon stopped")

    def _on_watch_event(self, event: WatchEvent) -> None:
        if self.on_event:
            self.on_event(event)
        self.batcher.enqueue(event)

    async def handle_batch(self, events: List[WatchEvent]) -> Optional[AnalysisResult]:
        """
        Process one flushed batch.

        Args:
            events: Debounced events, at most one per path

        Returns:
            The analysis result, or None when analysis is disabled
        """
        self.batches_processed += 1
        results = process_batch(events, self.config.source_extensions)
        significant = [r for r in results if r.action != ChangeAction.NONE]

        if significant:
            if self.on_actions:
                self.on_actions(significant)
            if self.config.write_reports:
                report_actions(self.project_root, significant)
            if self.config.write_history:
                record_actions(self.project_root, significant, [e.path for e in events])

        if not self.config.analyze_criticisms:
            return None

        result = await analyze_changes(self.project_root, events, self.config)
        if result.degraded:
            logger.warning(
                f"{len(result.degraded_analyzers)} analyzers degraded: "
                f"{', '.join(result.degraded_analyzers)}"
            )
        if result.criticisms and self.on_criticisms:
            self.on_criticisms(len(result.criticisms))
        return result

    def get_status(self) -> Dict:
        """Get daemon status."""
        status = self.watcher.get_status()
        status["pending_changes"] = self.batcher.pending_count
        status["batches_processed"] = self.batches_processed
        return status


async def start_daemon(
    project_root: Union[str, Path],
    config: Optional[CritConfig] = None,
    on_event: Optional[EventCallback] = None,
    on_actions: Optional[ActionsCallback] = None,
    on_criticisms: Optional[CriticismsCallback] = None,
) -> CritDaemon:
    """Create and start a daemon for one project."""
    daemon = CritDaemon(
        project_root,
        config=config,
        on_event=on_event,
        on_actions=on_actions,
        on_criticisms=on_criticisms,
    )
    await daemon.start()
    return daemon
