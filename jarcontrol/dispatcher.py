"""
Event dispatch.

One descriptor at a time: resolve the actor, stop the superseded animation,
move, snap the camera, start the new animation and finally drive the
recording session.  Nothing raised while handling a descriptor escapes
:meth:`EventDispatcher.dispatch`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Optional

from .animation import ActorState, AnimationTracker
from .events import EventDescriptor, MoveAction, RecordAction
from .recording import RecorderFactory, RecordingDecision, RecordingSession
from .registry import ActorRegistry, ActorRegistryEntry, UnknownActorError
from .scene.interfaces import Transform

LOG = logging.getLogger(__name__)

UNKNOWN_ACTOR = "unknown_actor"


class DispatchStatus(str, Enum):
    DISPATCHED = "dispatched"
    DROPPED = "dropped"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class DispatchResult:
    status: DispatchStatus
    reason: Optional[str] = None
    recording: Optional[RecordingDecision] = None

    @property
    def ok(self) -> bool:
        return self.status is DispatchStatus.DISPATCHED


def snap_camera(camera: Transform, focus: Transform) -> None:
    """
    Give the camera the focus point's current world pose.

    The pose is copied, so moving the focus point later leaves the camera
    where it is.
    """

    camera.set_world_position(focus.world_position)
    camera.set_world_rotation(focus.world_rotation)


def apply_move(transform: Transform, action: MoveAction) -> None:
    if action.do_translate:
        transform.set_world_position(action.translation)
    if action.do_rotate:
        transform.set_world_rotation(action.rotation_euler)


class EventDispatcher:
    def __init__(
        self,
        registry: ActorRegistry,
        camera: Transform,
        *,
        recorder_factory: Optional[RecorderFactory] = None,
        output_dir: Optional[Path] = None,
    ) -> None:
        self.registry = registry
        self.camera = camera
        self.output_dir = output_dir
        self._recorder_factory = recorder_factory
        self._tracker = AnimationTracker()
        self._actor_states: Dict[str, ActorState] = {name: ActorState() for name in registry.names()}
        self._recording: Optional[RecordingSession] = None

    # ------------------------------------------------------------------ helpers

    def _recording_session(self) -> RecordingSession:
        if self._recording is None:
            factory = self._recorder_factory
            if factory is None:
                from .runtime.gst_recorder import GstRecorder

                factory = GstRecorder
            self._recording = RecordingSession(self.output_dir, factory)
        return self._recording

    def _apply(self, entry: ActorRegistryEntry, descriptor: EventDescriptor) -> Optional[RecordingDecision]:
        state = self._actor_states.setdefault(entry.name, ActorState())
        diff = self._tracker.transition(state, descriptor.animation_name)
        if diff.to_stop:
            entry.animator.set_trigger(diff.to_stop, False)

        action = descriptor.action
        if isinstance(action, MoveAction):
            apply_move(entry.transform, action)

        snap_camera(self.camera, entry.camera_focus)

        if diff.to_start:
            entry.animator.set_trigger(diff.to_start, True)

        if isinstance(action, RecordAction):
            return self._recording_session().handle(action.start)
        return None

    # ------------------------------------------------------------------ public API

    @property
    def recording(self) -> Optional[RecordingSession]:
        return self._recording

    def actor_state(self, name: str) -> ActorState:
        return self._actor_states[name]

    def dispatch(self, descriptor: EventDescriptor, raw: Optional[str] = None) -> DispatchResult:
        try:
            entry = self.registry.resolve(descriptor.actor_name)
        except UnknownActorError:
            LOG.warning(
                "Descriptor names an unknown actor '%s'; camera and animations left unchanged. Known actors: %s",
                descriptor.actor_name,
                ", ".join(self.registry.names()),
            )
            return DispatchResult(DispatchStatus.DROPPED, UNKNOWN_ACTOR)

        try:
            decision = self._apply(entry, descriptor)
        except Exception as exc:
            LOG.exception(
                "Failed to apply descriptor for actor '%s' (animation '%s'). Descriptor: %s",
                descriptor.actor_name,
                descriptor.animation_name,
                raw if raw is not None else descriptor.to_dict(),
            )
            return DispatchResult(DispatchStatus.FAILED, str(exc) or exc.__class__.__name__)

        LOG.info(
            "Dispatched '%s' to actor '%s' (%s)",
            descriptor.animation_name,
            descriptor.actor_name,
            descriptor.action.to_dict()["kind"],
        )
        return DispatchResult(DispatchStatus.DISPATCHED, recording=decision)

    def snapshot(self) -> dict:
        return {
            "actors": {name: state.to_dict() for name, state in self._actor_states.items()},
            "recording": self._recording.snapshot() if self._recording is not None else None,
        }
