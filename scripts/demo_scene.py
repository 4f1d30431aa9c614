"""Walk the controller through a short scripted scene.

Drops a handful of descriptors into a temporary watch directory, lets the
watcher consume them against the in-memory scene and prints the resulting
scene state.  Useful for checking a configuration without an engine attached.

Examples
--------
Run the built-in script with the packaged configuration::

    python scripts/demo_scene.py

Record the scene into ``./recordings`` (requires GStreamer)::

    python scripts/demo_scene.py --output-dir ./recordings --record
"""

from __future__ import annotations

import argparse
import json
import sys
import tempfile
from pathlib import Path
from typing import Iterable

from jarcontrol.codec import encode
from jarcontrol.config import load_config
from jarcontrol.dispatcher import EventDispatcher
from jarcontrol.events import EventDescriptor, MoveAction, NoAction, RecordAction
from jarcontrol.registry import ActorRegistry
from jarcontrol.runtime.gst_recorder import GstRecorder
from jarcontrol.scene import Scene, Vec3
from jarcontrol.utils.logging import configure_logging
from jarcontrol.watcher import DirectoryWatcher, ScanOutcome


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="jarcontrol scripted scene demo")
    parser.add_argument("--config", default=None, help="YAML configuration to load")
    parser.add_argument("--output-dir", default=None, help="recording output directory")
    parser.add_argument("--record", action="store_true", help="wrap the script in a recording")
    parser.add_argument("--log-level", default="INFO", help="logging level")
    return parser.parse_args(argv)


def build_script(record: bool) -> list[EventDescriptor]:
    script = [
        EventDescriptor("robot_kyle", "Walk", NoAction()),
        EventDescriptor("banana_man", "Idle", MoveAction(do_translate=True, translation=Vec3(1.0, 0.0, 2.0))),
        EventDescriptor("robot_kyle", "Run", MoveAction(do_rotate=True, rotation_euler=Vec3(0.0, 90.0, 0.0))),
        EventDescriptor("robot_kyle", "Run", NoAction()),
    ]
    if record:
        script.insert(0, EventDescriptor("robot_kyle", "Idle", RecordAction(start=True)))
        script.append(EventDescriptor("robot_kyle", "Idle", RecordAction(start=False)))
    return script


def main(argv: Iterable[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)
    config = load_config(args.config, overrides={"output_dir": args.output_dir})

    scene = Scene.from_config(config)
    registry = ActorRegistry.from_bindings(config.actors, scene)
    dispatcher = EventDispatcher(
        registry,
        scene.camera,
        recorder_factory=GstRecorder.factory(config.recorder),
        output_dir=config.output_dir,
    )

    with tempfile.TemporaryDirectory(prefix="jarcontrol-") as tmp:
        watch_dir = Path(tmp)
        watcher = DirectoryWatcher(watch_dir, dispatcher, extension=config.extension)
        for index, descriptor in enumerate(build_script(args.record)):
            (watch_dir / f"{index:03d}{config.extension}").write_text(encode(descriptor), encoding="utf-8")
            # One descriptor per scan keeps the script order deterministic.
            if watcher.scan_once() is not ScanOutcome.PROCESSED:
                print(f"descriptor {index} was not processed", file=sys.stderr)
                return 1

    print(json.dumps({"scene": scene.snapshot(), "controller": dispatcher.snapshot()}, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
