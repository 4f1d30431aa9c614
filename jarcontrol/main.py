"""
Controller process entrypoint.

Resolves configuration, initialises logging and runs the directory watcher
against the headless in-memory scene.  An engine integration builds its own
:class:`~jarcontrol.registry.ActorRegistry` and reuses :func:`build_watcher`.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import signal
import sys
import time
from pathlib import Path
from typing import Optional

from . import ConfigurationError
from .codec import encode
from .config import ControllerConfig, load_config
from .dispatcher import EventDispatcher
from .events import Action, EventDescriptor, MoveAction, NoAction, RecordAction
from .registry import ActorRegistry
from .runtime.gst_recorder import GstRecorder
from .scene import Scene, Vec3
from .utils.logging import configure_logging
from .watcher import DirectoryWatcher, ScanOutcome

LOG = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_WATCH_DIR_MISSING = 1
EXIT_CONFIG_ERROR = 2


def build_watcher(config: ControllerConfig, registry: ActorRegistry, scene: Scene) -> DirectoryWatcher:
    dispatcher = EventDispatcher(
        registry,
        scene.camera,
        recorder_factory=GstRecorder.factory(config.recorder),
        output_dir=config.output_dir,
    )
    return DirectoryWatcher(
        config.watch_dir,
        dispatcher,
        extension=config.extension,
        interval=config.poll_interval,
    )


async def serve(config: ControllerConfig) -> int:
    """
    Run the watch loop until it ends or a termination signal arrives.
    """

    if config.watch_dir is None or not config.watch_dir.is_dir():
        LOG.warning(
            "Watch directory is not set or does not exist, nothing to watch. watch_dir: %s",
            config.watch_dir,
        )
        return EXIT_WATCH_DIR_MISSING
    if config.output_dir is None:
        LOG.warning("No output_dir configured; record events will be ignored.")

    scene = Scene.from_config(config)
    registry = ActorRegistry.from_bindings(config.actors, scene)
    watcher = build_watcher(config, registry, scene)

    loop = asyncio.get_running_loop()
    for signame in ("SIGINT", "SIGTERM"):
        try:
            loop.add_signal_handler(getattr(signal, signame), watcher.stop)
        except (NotImplementedError, RuntimeError, ValueError):  # pragma: no cover - platform specific
            LOG.debug("Signal handler for %s not installed", signame)

    outcome = await watcher.run()
    LOG.info("Final state: %s", json.dumps(watcher.dispatcher.snapshot(), sort_keys=True))
    if outcome is ScanOutcome.MISSING:
        return EXIT_WATCH_DIR_MISSING
    return EXIT_OK


def _descriptor_from_args(args: argparse.Namespace) -> EventDescriptor:
    action: Action = NoAction()
    if args.record is not None:
        action = RecordAction(start=args.record == "start")
    elif args.move is not None or args.rotate is not None:
        action = MoveAction(
            do_translate=args.move is not None,
            translation=Vec3.of(args.move or (0.0, 0.0, 0.0)),
            do_rotate=args.rotate is not None,
            rotation_euler=Vec3.of(args.rotate or (0.0, 0.0, 0.0)),
        )
    return EventDescriptor(actor_name=args.actor, animation_name=args.animation, action=action)


def emit(config: ControllerConfig, descriptor: EventDescriptor) -> Path:
    """
    Write ``descriptor`` into the watch directory the way a producer would.

    The file is written under a temporary suffix and renamed so the watcher
    never reads a half-written descriptor.
    """

    if config.watch_dir is None or not config.watch_dir.is_dir():
        raise ConfigurationError(f"Watch directory does not exist: {config.watch_dir}")
    stem = f"{descriptor.actor_name}-{time.time_ns()}"
    staging = config.watch_dir / f"{stem}.tmp"
    target = config.watch_dir / f"{stem}{config.extension}"
    staging.write_text(encode(descriptor), encoding="utf-8")
    staging.replace(target)
    return target


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="File-driven scene controller")
    parser.add_argument("--config", default=None, help="path to a YAML configuration file")
    parser.add_argument("--watch-dir", default=None, help="override the watched directory")
    parser.add_argument("--output-dir", default=None, help="override the recording output directory")
    parser.add_argument("--log-level", default="INFO", help="logging level (DEBUG, INFO, ...)")

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("run", help="watch the directory and apply descriptors (default)")

    emit_parser = subparsers.add_parser("emit", help="drop a descriptor file into the watch directory")
    emit_parser.add_argument("actor", help="actor name, e.g. robot_kyle")
    emit_parser.add_argument("animation", help="animation trigger to activate")
    group = emit_parser.add_mutually_exclusive_group()
    group.add_argument("--record", choices=("start", "stop"), default=None, help="start or stop recording")
    group.add_argument("--move", nargs=3, type=float, metavar=("X", "Y", "Z"), help="absolute position")
    emit_parser.add_argument(
        "--rotate", nargs=3, type=float, metavar=("X", "Y", "Z"), help="absolute Euler rotation"
    )

    args = parser.parse_args(argv)
    if args.command == "emit" and args.record is not None and args.rotate is not None:
        parser.error("--rotate cannot be combined with --record")
    return args


def run(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    try:
        configure_logging(args.log_level)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    try:
        config = load_config(
            args.config,
            overrides={"watch_dir": args.watch_dir, "output_dir": args.output_dir},
        )
    except ConfigurationError as exc:
        LOG.error("%s", exc)
        return EXIT_CONFIG_ERROR

    if args.command == "emit":
        try:
            path = emit(config, _descriptor_from_args(args))
        except ConfigurationError as exc:
            LOG.error("%s", exc)
            return EXIT_WATCH_DIR_MISSING
        LOG.info("Wrote descriptor %s", path)
        return EXIT_OK

    try:
        return asyncio.run(serve(config))
    except ConfigurationError as exc:
        LOG.error("%s", exc)
        return EXIT_CONFIG_ERROR
    except KeyboardInterrupt:
        LOG.info("Controller interrupted by user.")
        return EXIT_OK


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
