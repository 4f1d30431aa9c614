from __future__ import annotations

import asyncio
import json
from pathlib import Path

from jarcontrol.codec import decode
from jarcontrol.config import ControllerConfig
from jarcontrol.events import MoveAction, RecordAction
from jarcontrol.main import EXIT_CONFIG_ERROR, EXIT_OK, EXIT_WATCH_DIR_MISSING, run, serve
from jarcontrol.scene import Vec3


def test_missing_watch_dir_exits_with_one(tmp_path: Path) -> None:
    assert run(["--watch-dir", str(tmp_path / "absent")]) == EXIT_WATCH_DIR_MISSING


def test_missing_config_file_exits_with_two(tmp_path: Path) -> None:
    assert run(["--config", str(tmp_path / "absent.yaml")]) == EXIT_CONFIG_ERROR


def test_emit_writes_decodable_descriptor(tmp_path: Path) -> None:
    code = run(["--watch-dir", str(tmp_path), "emit", "banana_man", "Idle", "--move", "1", "0", "2"])

    files = list(tmp_path.glob("*.json"))
    assert code == EXIT_OK
    assert len(files) == 1
    descriptor = decode(files[0].read_text(encoding="utf-8"))
    assert descriptor.actor_name == "banana_man"
    assert descriptor.action == MoveAction(do_translate=True, translation=Vec3(1.0, 0.0, 2.0))


def test_emit_record(tmp_path: Path) -> None:
    run(["--watch-dir", str(tmp_path), "emit", "robot_kyle", "Wave", "--record", "start"])

    (path,) = tmp_path.glob("*.json")
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["jarEvent"]["eventType"] == "RecordEvent"
    assert decode(path.read_text(encoding="utf-8")).action == RecordAction(start=True)


def test_serve_consumes_until_directory_removed(tmp_path: Path) -> None:
    inbox = tmp_path / "inbox"
    inbox.mkdir()
    (inbox / "a.json").write_text('{"character": "robot_kyle", "animation": "Walk"}', encoding="utf-8")
    config = ControllerConfig(watch_dir=inbox, poll_interval=0.01)

    async def scenario() -> int:
        task = asyncio.create_task(serve(config))
        while any(inbox.iterdir()):
            await asyncio.sleep(0.01)
        inbox.rmdir()
        return await asyncio.wait_for(task, timeout=5)

    assert asyncio.run(scenario()) == EXIT_WATCH_DIR_MISSING
