"""
Two-state recording session over an external recorder.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from .scene.interfaces import Recorder, RecorderError, RecorderUnavailableError

LOG = logging.getLogger(__name__)

RecorderFactory = Callable[[Optional[Path]], Recorder]

ALREADY_RECORDING = "already recording"
ALREADY_STOPPED = "already stopped"
RECORDER_UNAVAILABLE = "recorder unavailable"


class RecordingPhase(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"


class RecordingEffect(str, Enum):
    START = "start_recording"
    STOP = "stop_recording"
    IGNORE = "ignore"


@dataclass(frozen=True, slots=True)
class RecordingDecision:
    effect: RecordingEffect
    reason: Optional[str] = None

    @property
    def ignored(self) -> bool:
        return self.effect is RecordingEffect.IGNORE


class RecordingSession:
    """
    Idle/recording state machine.

    The recorder is built on the first start request.  When it cannot be
    built the failure is remembered and every later request is ignored until
    :meth:`reconfigure` is called.
    """

    def __init__(self, output_dir: Optional[Path], recorder_factory: RecorderFactory) -> None:
        self.output_dir = output_dir
        self.phase = RecordingPhase.IDLE
        self._factory = recorder_factory
        self._recorder: Optional[Recorder] = None
        self._unavailable_reason: Optional[str] = None

    # ------------------------------------------------------------------ helpers

    def _mark_unavailable(self, exc: Exception) -> None:
        self._recorder = None
        self._unavailable_reason = str(exc) or exc.__class__.__name__
        LOG.warning(
            "Recording disabled, recorder could not be created for output dir %s: %s",
            self.output_dir,
            self._unavailable_reason,
        )

    def _ensure_recorder(self) -> Optional[Recorder]:
        if self._recorder is not None:
            return self._recorder
        try:
            self._recorder = self._factory(self.output_dir)
        except RecorderUnavailableError as exc:
            self._mark_unavailable(exc)
            return None
        return self._recorder

    def _ignore(self, reason: str) -> RecordingDecision:
        LOG.info("Record request ignored: %s", reason)
        return RecordingDecision(RecordingEffect.IGNORE, reason)

    def _start(self) -> RecordingDecision:
        if self.phase is RecordingPhase.RECORDING:
            return self._ignore(ALREADY_RECORDING)
        if self._unavailable_reason is not None:
            return self._ignore(RECORDER_UNAVAILABLE)

        recorder = self._ensure_recorder()
        if recorder is None:
            return self._ignore(RECORDER_UNAVAILABLE)
        try:
            recorder.prepare()
        except RecorderUnavailableError as exc:
            self._mark_unavailable(exc)
            return self._ignore(RECORDER_UNAVAILABLE)

        recorder.start()
        self.phase = RecordingPhase.RECORDING
        LOG.info("Recording started")
        return RecordingDecision(RecordingEffect.START)

    def _stop(self) -> RecordingDecision:
        if self.phase is RecordingPhase.IDLE or self._recorder is None:
            return self._ignore(ALREADY_STOPPED)

        recorder = self._recorder
        try:
            recorder.stop()
        except RecorderError:
            if not recorder.is_recording:
                self.phase = RecordingPhase.IDLE
            raise
        self.phase = RecordingPhase.IDLE
        LOG.info("Recording stopped")
        return RecordingDecision(RecordingEffect.STOP)

    # ------------------------------------------------------------------ public API

    @property
    def available(self) -> bool:
        return self._unavailable_reason is None

    def handle(self, start: bool) -> RecordingDecision:
        return self._start() if start else self._stop()

    def reconfigure(self, output_dir: Optional[Path]) -> None:
        """
        Point the session at a new output directory and clear a cached failure.
        """

        if self.phase is RecordingPhase.RECORDING:
            raise RecorderError("cannot change the output directory while recording")
        self.output_dir = output_dir
        self._recorder = None
        self._unavailable_reason = None

    def snapshot(self) -> dict:
        return {
            "phase": self.phase.value,
            "outputDir": str(self.output_dir) if self.output_dir is not None else None,
            "available": self.available,
            "unavailableReason": self._unavailable_reason,
        }
