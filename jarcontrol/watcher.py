"""
Directory watcher.

Polls the watch directory on a fixed interval and consumes at most one
descriptor file per scan: read it, delete it, decode it, dispatch it.  Read
and delete are not transactional; a crash in between may replay or lose one
event.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import List, Optional, Set

from .codec import DecodeError, parse
from .dispatcher import DispatchResult, EventDispatcher

LOG = logging.getLogger(__name__)


class ScanOutcome(str, Enum):
    MISSING = "missing"
    IDLE = "idle"
    EMPTY = "empty"
    REJECTED = "rejected"
    PROCESSED = "processed"


class DirectoryWatcher:
    def __init__(
        self,
        watch_dir: Path,
        dispatcher: EventDispatcher,
        *,
        extension: str = ".json",
        interval: float = 1.0,
    ) -> None:
        self.watch_dir = Path(watch_dir)
        self.dispatcher = dispatcher
        self.extension = extension.lower() if extension.startswith(".") else f".{extension.lower()}"
        self.interval = max(0.0, float(interval))
        self.last_result: Optional[DispatchResult] = None
        self._stop_event: Optional[asyncio.Event] = None
        self._stop_requested = False
        self._unconsumable: Set[Path] = set()

    # ------------------------------------------------------------------ helpers

    def pending_files(self) -> List[Path]:
        """
        Descriptor files waiting in the watch directory, in name order.

        Files that could not be read or deleted earlier are left out so they
        cannot block the files queued behind them.
        """

        present = [
            entry
            for entry in self.watch_dir.iterdir()
            if entry.is_file() and entry.suffix.lower() == self.extension
        ]
        self._unconsumable.intersection_update(present)
        return sorted(entry for entry in present if entry not in self._unconsumable)

    def _consume(self, path: Path) -> Optional[str]:
        try:
            content = path.read_text(encoding="utf-8-sig", errors="replace")
        except OSError as exc:
            LOG.warning("Could not read descriptor %s, skipping it until it is removed: %s", path, exc)
            self._unconsumable.add(path)
            return None
        try:
            path.unlink()
        except FileNotFoundError:
            LOG.debug("Descriptor %s was already removed", path)
        except OSError as exc:
            LOG.warning("Could not delete descriptor %s, skipping it until it is removed: %s", path, exc)
            self._unconsumable.add(path)
            return None
        return content

    # ------------------------------------------------------------------ public API

    def scan_once(self) -> ScanOutcome:
        if not self.watch_dir.is_dir():
            return ScanOutcome.MISSING

        try:
            candidates = self.pending_files()
        except OSError as exc:
            LOG.warning("Could not list watch directory %s: %s", self.watch_dir, exc)
            return ScanOutcome.IDLE
        if not candidates:
            return ScanOutcome.IDLE

        path = candidates[0]
        content = self._consume(path)
        if content is None:
            return ScanOutcome.IDLE
        if not content.strip():
            LOG.warning("The descriptor file found is empty. File: %s", path)
            return ScanOutcome.EMPTY

        descriptor = parse(content)
        if isinstance(descriptor, DecodeError):
            LOG.warning("Dropping descriptor %s: %s. Content: %s", path.name, descriptor, content)
            return ScanOutcome.REJECTED

        self.last_result = self.dispatcher.dispatch(descriptor, raw=content)
        return ScanOutcome.PROCESSED

    def stop(self) -> None:
        self._stop_requested = True
        if self._stop_event is not None:
            self._stop_event.set()

    async def run(self) -> ScanOutcome:
        """
        Poll until the watch directory disappears or :meth:`stop` is called.

        Returns ``ScanOutcome.MISSING`` when the directory went away and
        ``ScanOutcome.IDLE`` after a requested stop.
        """

        self._stop_event = asyncio.Event()
        if self._stop_requested:
            self._stop_event.set()
        LOG.info("Watching %s for *%s descriptors every %.2fs", self.watch_dir, self.extension, self.interval)
        try:
            while not self._stop_event.is_set():
                outcome = self.scan_once()
                if outcome is ScanOutcome.MISSING:
                    LOG.warning(
                        "Watch directory does not exist, check the 'watch_dir' setting. Path: %s",
                        self.watch_dir,
                    )
                    return outcome
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval)
                except asyncio.TimeoutError:
                    pass
        finally:
            self._stop_event = None
        LOG.info("Watcher stopped")
        return ScanOutcome.IDLE
