"""Tests covering descriptor dispatch against the in-memory scene."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import pytest

from jarcontrol.codec import decode
from jarcontrol.config import ControllerConfig
from jarcontrol.dispatcher import UNKNOWN_ACTOR, DispatchStatus, EventDispatcher
from jarcontrol.events import EventDescriptor, MoveAction, NoAction, RecordAction
from jarcontrol.recording import RecordingEffect, RecordingPhase
from jarcontrol.registry import ActorRegistry
from jarcontrol.scene import RecorderUnavailableError, Scene, Vec3


class FakeRecorder:
    def __init__(self, output_dir: Optional[Path]) -> None:
        self.output_dir = output_dir
        self.calls: List[str] = []

    @property
    def is_recording(self) -> bool:
        return bool(self.calls) and self.calls[-1] == "start"

    def prepare(self) -> None:
        self.calls.append("prepare")

    def start(self) -> None:
        self.calls.append("start")

    def stop(self) -> None:
        self.calls.append("stop")


class Harness:
    def __init__(self, recorder_factory=None, output_dir: Optional[Path] = None) -> None:
        config = ControllerConfig()
        self.scene = Scene.from_config(config)
        self.scene.transform("robot_kyle_cam_point").set_world_position(Vec3(0.0, 1.6, -2.0))
        self.scene.transform("robot_kyle_cam_point").set_world_rotation(Vec3(10.0, 180.0, 0.0))
        self.scene.transform("banana_man_cam_point").set_world_position(Vec3(5.0, 1.2, 3.0))
        self.registry = ActorRegistry.from_bindings(config.actors, self.scene)
        self.recorders: List[FakeRecorder] = []
        self.dispatcher = EventDispatcher(
            self.registry,
            self.scene.camera,
            recorder_factory=recorder_factory or self._build_recorder,
            output_dir=output_dir,
        )

    def _build_recorder(self, output_dir: Optional[Path]) -> FakeRecorder:
        recorder = FakeRecorder(output_dir)
        self.recorders.append(recorder)
        return recorder

    def history(self, actor: str) -> list:
        return list(self.scene.animator(actor).history)


def test_scenario_walk_snaps_camera_to_robot() -> None:
    harness = Harness()
    descriptor = decode('{"character":"robot_kyle","animation":"Walk","jarEvent":{"eventType":"IgnoreEvent"}}')

    result = harness.dispatcher.dispatch(descriptor)

    assert result.status is DispatchStatus.DISPATCHED
    assert harness.history("robot_kyle") == [("Walk", True)]
    assert harness.scene.transform("robot_kyle").world_position == Vec3()
    assert harness.scene.camera.world_position == Vec3(0.0, 1.6, -2.0)
    assert harness.scene.camera.world_rotation == Vec3(10.0, 180.0, 0.0)


def test_scenario_move_banana_man() -> None:
    harness = Harness()
    descriptor = decode(
        '{"character":"banana_man","animation":"Idle",'
        '"jarEvent":{"eventType":"MoveEvent","doMove":true,'
        '"moveParams":{"movePosX":1,"movePosY":0,"movePosZ":2}}}'
    )

    result = harness.dispatcher.dispatch(descriptor)

    assert result.ok
    assert harness.scene.transform("banana_man").world_position == Vec3(1.0, 0.0, 2.0)
    assert harness.history("banana_man") == [("Idle", True)]
    assert harness.scene.camera.world_position == Vec3(5.0, 1.2, 3.0)


def test_scenario_walk_then_run_stops_walk_first() -> None:
    harness = Harness()

    harness.dispatcher.dispatch(EventDescriptor("robot_kyle", "Walk"))
    harness.dispatcher.dispatch(EventDescriptor("robot_kyle", "Run"))

    assert harness.history("robot_kyle") == [("Walk", True), ("Walk", False), ("Run", True)]
    assert harness.dispatcher.actor_state("robot_kyle").active_animation == "Run"


def test_redundant_descriptor_makes_no_animator_calls() -> None:
    harness = Harness()
    harness.dispatcher.dispatch(EventDescriptor("robot_kyle", "Run"))
    before = len(harness.history("robot_kyle"))

    harness.dispatcher.dispatch(EventDescriptor("robot_kyle", "Walk"))
    harness.dispatcher.dispatch(EventDescriptor("robot_kyle", "Walk"))

    calls = harness.history("robot_kyle")[before:]
    assert calls == [("Run", False), ("Walk", True)]


def test_actor_states_are_independent() -> None:
    harness = Harness()

    harness.dispatcher.dispatch(EventDescriptor("robot_kyle", "Walk"))
    harness.dispatcher.dispatch(EventDescriptor("banana_man", "Dance"))

    assert harness.history("robot_kyle") == [("Walk", True)]
    assert harness.history("banana_man") == [("Dance", True)]
    assert harness.dispatcher.snapshot()["actors"] == {
        "robot_kyle": {"activeAnimation": "Walk"},
        "banana_man": {"activeAnimation": "Dance"},
    }


def test_unknown_actor_touches_nothing(caplog: pytest.LogCaptureFixture) -> None:
    harness = Harness()
    camera_before = harness.scene.snapshot()

    with caplog.at_level(logging.WARNING, logger="jarcontrol.dispatcher"):
        result = harness.dispatcher.dispatch(
            EventDescriptor("mystery_guest", "Walk", RecordAction(start=True))
        )

    assert result.status is DispatchStatus.DROPPED
    assert result.reason == UNKNOWN_ACTOR
    assert harness.scene.snapshot() == camera_before
    assert harness.history("robot_kyle") == []
    assert harness.history("banana_man") == []
    assert harness.recorders == []
    unknown_logs = [record for record in caplog.records if "unknown actor" in record.getMessage()]
    assert len(unknown_logs) == 1


def test_translate_only_keeps_orientation() -> None:
    harness = Harness()
    robot = harness.scene.transform("robot_kyle")
    robot.set_world_rotation(Vec3(0.0, 45.0, 0.0))

    harness.dispatcher.dispatch(
        EventDescriptor(
            "robot_kyle",
            "Walk",
            MoveAction(do_translate=True, translation=Vec3(2.0, 0.0, 2.0), rotation_euler=Vec3(0.0, 270.0, 0.0)),
        )
    )

    assert robot.world_position == Vec3(2.0, 0.0, 2.0)
    assert robot.world_rotation == Vec3(0.0, 45.0, 0.0)


def test_rotate_only_keeps_position() -> None:
    harness = Harness()
    robot = harness.scene.transform("robot_kyle")
    robot.set_world_position(Vec3(7.0, 0.0, 7.0))

    harness.dispatcher.dispatch(
        EventDescriptor(
            "robot_kyle",
            "Turn",
            MoveAction(translation=Vec3(1.0, 1.0, 1.0), do_rotate=True, rotation_euler=Vec3(0.0, 90.0, 0.0)),
        )
    )

    assert robot.world_position == Vec3(7.0, 0.0, 7.0)
    assert robot.world_rotation == Vec3(0.0, 90.0, 0.0)


def test_camera_does_not_follow_focus_point_afterwards() -> None:
    harness = Harness()
    focus = harness.scene.transform("robot_kyle_cam_point")

    harness.dispatcher.dispatch(EventDescriptor("robot_kyle", "Walk"))
    focus.set_world_position(Vec3(100.0, 100.0, 100.0))
    focus.set_world_rotation(Vec3(0.0, 0.0, 90.0))

    assert harness.scene.camera.world_position == Vec3(0.0, 1.6, -2.0)
    assert harness.scene.camera.world_rotation == Vec3(10.0, 180.0, 0.0)


def test_record_actions_drive_session(tmp_path: Path) -> None:
    harness = Harness(output_dir=tmp_path)
    assert harness.dispatcher.recording is None

    results = [
        harness.dispatcher.dispatch(EventDescriptor("robot_kyle", "Wave", RecordAction(start=start)))
        for start in (True, True, False, False)
    ]

    assert [result.recording.effect for result in results] == [
        RecordingEffect.START,
        RecordingEffect.IGNORE,
        RecordingEffect.STOP,
        RecordingEffect.IGNORE,
    ]
    assert all(result.ok for result in results)
    assert harness.dispatcher.recording.phase is RecordingPhase.IDLE
    assert len(harness.recorders) == 1
    assert harness.recorders[0].output_dir == tmp_path
    assert harness.recorders[0].calls == ["prepare", "start", "stop"]


def test_recorder_unavailable_keeps_dispatching() -> None:
    def broken_factory(output_dir: Optional[Path]) -> FakeRecorder:
        raise RecorderUnavailableError("no output directory configured")

    harness = Harness(recorder_factory=broken_factory)

    result = harness.dispatcher.dispatch(EventDescriptor("robot_kyle", "Wave", RecordAction(start=True)))

    assert result.ok
    assert result.recording.effect is RecordingEffect.IGNORE
    assert harness.history("robot_kyle") == [("Wave", True)]
    assert harness.dispatcher.snapshot()["recording"]["available"] is False


def test_capability_failure_is_contained(caplog: pytest.LogCaptureFixture) -> None:
    harness = Harness()

    class ExplodingAnimator:
        def set_trigger(self, name: str, active: bool) -> None:
            raise RuntimeError("animator detached")

    entry = harness.registry.resolve("banana_man")
    object.__setattr__(entry, "animator", ExplodingAnimator())
    raw = '{"character":"banana_man","animation":"Idle"}'

    with caplog.at_level(logging.ERROR, logger="jarcontrol.dispatcher"):
        result = harness.dispatcher.dispatch(decode(raw), raw=raw)
        follow_up = harness.dispatcher.dispatch(EventDescriptor("robot_kyle", "Walk"))

    assert result.status is DispatchStatus.FAILED
    assert result.reason == "animator detached"
    assert follow_up.ok
    messages = [record.getMessage() for record in caplog.records]
    assert any("banana_man" in message and "Idle" in message and raw in message for message in messages)


def test_no_action_descriptor_does_not_move() -> None:
    harness = Harness()
    robot = harness.scene.transform("robot_kyle")

    harness.dispatcher.dispatch(EventDescriptor("robot_kyle", "Walk", NoAction()))

    assert robot.world_position == Vec3()
    assert robot.world_rotation == Vec3()
