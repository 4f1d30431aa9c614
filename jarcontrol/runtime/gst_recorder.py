"""
GStreamer-backed recorder.

Captures the configured video source into a timestamped MP4 inside the output
directory.  Constructing a recorder only validates the output directory, so it
works without the native runtime; :meth:`GstRecorder.prepare` raises
:class:`RecorderUnavailableError` when GStreamer cannot be loaded.
"""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Any, Callable, Optional, TYPE_CHECKING

from ..scene.interfaces import RecorderError, RecorderUnavailableError

try:  # pragma: no cover - availability depends on host environment
    import gi  # type: ignore

    gi.require_version("Gst", "1.0")
    from gi.repository import Gst  # type: ignore
except (ImportError, ValueError) as exc:  # pragma: no cover
    Gst = None  # type: ignore[assignment]
    _GST_IMPORT_ERROR = exc
else:  # pragma: no cover - executed only when GStreamer is present
    _GST_IMPORT_ERROR = None

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..config import RecorderSettings
    from gi.repository import Gst as GstModule
else:
    GstModule = Any

LOG = logging.getLogger(__name__)

_GST_INIT_LOCK = threading.Lock()
_GST_INITIALISED = False

DEFAULT_SOURCE = "videotestsrc is-live=true"
DEFAULT_ENCODER = "x264enc tune=zerolatency"
DEFAULT_MUXER = "mp4mux"
DEFAULT_EOS_TIMEOUT = 2.0


def _ensure_gst_initialised() -> None:
    global _GST_INITIALISED
    if Gst is None:
        raise RecorderUnavailableError(
            "GStreamer runtime is not available. Install PyGObject/GStreamer 1.20+ to enable recording."
        ) from _GST_IMPORT_ERROR
    with _GST_INIT_LOCK:
        if _GST_INITIALISED:
            return
        Gst.init(None)
        _GST_INITIALISED = True


def validate_output_dir(output_dir: Optional[Path]) -> Path:
    if output_dir is None or not str(output_dir).strip():
        raise RecorderUnavailableError("no recording output directory configured")
    path = Path(output_dir).expanduser()
    if not path.is_dir():
        raise RecorderUnavailableError(f"recording output directory does not exist: {path}")
    return path


class GstRecorder:
    """
    Record one clip per start/stop pair.

    The pipeline is ``source ! videoconvert ! encoder ! muxer ! filesink``.
    Stopping sends EOS and waits for the muxer to finalise the file before
    tearing the pipeline down.  That wait blocks the calling thread for up to
    ``eos_timeout`` seconds; when called from the watch loop, scans and
    signal handling are held off until it returns.
    """

    def __init__(
        self,
        output_dir: Optional[Path],
        *,
        source: str = DEFAULT_SOURCE,
        encoder: str = DEFAULT_ENCODER,
        muxer: str = DEFAULT_MUXER,
        file_prefix: str = "capture",
        eos_timeout: float = DEFAULT_EOS_TIMEOUT,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.output_dir = validate_output_dir(output_dir)
        self.source = source
        self.encoder = encoder
        self.muxer = muxer
        self.file_prefix = file_prefix or "capture"
        self.eos_timeout = max(0.0, float(eos_timeout))
        self._clock = clock or time.time
        self._pipeline: Optional[GstModule.Pipeline] = None
        self._recording = False
        self.current_path: Optional[Path] = None

    @classmethod
    def factory(cls, settings: "RecorderSettings") -> Callable[[Optional[Path]], "GstRecorder"]:
        """
        Bind recorder settings, leaving the output directory to the session.
        """

        def build(output_dir: Optional[Path]) -> "GstRecorder":
            return cls(
                output_dir,
                source=settings.source,
                encoder=settings.encoder,
                muxer=settings.muxer,
                file_prefix=settings.file_prefix,
                eos_timeout=settings.eos_timeout,
            )

        return build

    # ------------------------------------------------------------------ helpers

    def next_output_path(self) -> Path:
        stamp = time.strftime("%Y%m%d-%H%M%S", time.localtime(self._clock()))
        candidate = self.output_dir / f"{self.file_prefix}-{stamp}.mp4"
        counter = 1
        while candidate.exists():
            candidate = self.output_dir / f"{self.file_prefix}-{stamp}-{counter}.mp4"
            counter += 1
        return candidate

    def describe_pipeline(self, location: Path) -> str:
        return (
            f"{self.source} ! videoconvert ! {self.encoder} ! {self.muxer} "
            f'! filesink location="{location.as_posix()}"'
        )

    def _set_state(self, state: GstModule.State) -> None:
        if self._pipeline is None:
            raise RecorderError("Recorder pipeline is not prepared.")
        result = self._pipeline.set_state(state)
        if result == Gst.StateChangeReturn.FAILURE:
            raise RecorderError(f"Failed to set recorder pipeline state to {state}.")

    def _wait_for_eos(self) -> None:
        bus = self._pipeline.get_bus() if self._pipeline is not None else None
        if not bus:
            LOG.warning("Recorder bus unavailable; output file may be truncated.")
            return
        mask = Gst.MessageType.EOS | Gst.MessageType.ERROR
        message = bus.timed_pop_filtered(int(self.eos_timeout * 1_000_000_000), mask)
        if message is None:
            LOG.warning("Recorder did not reach EOS within %.1fs; output may be truncated.", self.eos_timeout)
            return
        if message.type == Gst.MessageType.ERROR:
            err, debug = message.parse_error()
            LOG.warning("Recorder reported an error while finalising: %s (%s)", err, debug)

    def _teardown(self) -> None:
        if self._pipeline is not None:
            try:
                self._pipeline.set_state(Gst.State.NULL)
            finally:
                self._pipeline = None
        self._recording = False

    # ------------------------------------------------------------------ public API

    @property
    def is_recording(self) -> bool:
        return self._recording

    def prepare(self) -> None:
        if self._pipeline is not None:
            return
        _ensure_gst_initialised()
        location = self.next_output_path()
        description = self.describe_pipeline(location)
        try:
            self._pipeline = Gst.parse_launch(description)
        except Exception as exc:
            raise RecorderUnavailableError(f"Invalid recorder pipeline '{description}': {exc}") from exc
        self.current_path = location
        LOG.debug("Recorder pipeline prepared: %s", description)

    def start(self) -> None:
        if self._recording:
            return
        self.prepare()
        try:
            self._set_state(Gst.State.PLAYING)
        except RecorderError:
            self._teardown()
            raise
        self._recording = True
        LOG.info("Recording to %s", self.current_path)

    def stop(self) -> None:
        if self._pipeline is None:
            self._recording = False
            return
        try:
            self._pipeline.send_event(Gst.Event.new_eos())
            self._wait_for_eos()
        finally:
            self._teardown()
        LOG.info("Recording finalised: %s", self.current_path)
