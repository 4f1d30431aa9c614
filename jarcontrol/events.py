"""
Event descriptor domain types.

A descriptor carries exactly one action.  Move and record never travel
together; translate and rotate are toggled independently inside a move.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from .scene.interfaces import Vec3


@dataclass(frozen=True, slots=True)
class NoAction:
    """Animation and camera update only."""

    def to_dict(self) -> dict:
        return {"kind": "none"}


@dataclass(frozen=True, slots=True)
class MoveAction:
    do_translate: bool = False
    translation: Vec3 = field(default_factory=Vec3)
    do_rotate: bool = False
    rotation_euler: Vec3 = field(default_factory=Vec3)

    def to_dict(self) -> dict:
        return {
            "kind": "move",
            "doTranslate": bool(self.do_translate),
            "translation": self.translation.to_dict(),
            "doRotate": bool(self.do_rotate),
            "rotationEuler": self.rotation_euler.to_dict(),
        }


@dataclass(frozen=True, slots=True)
class RecordAction:
    start: bool

    def to_dict(self) -> dict:
        return {"kind": "record", "start": bool(self.start)}


Action = Union[NoAction, MoveAction, RecordAction]


@dataclass(frozen=True, slots=True)
class EventDescriptor:
    actor_name: str
    animation_name: str
    action: Action = field(default_factory=NoAction)

    def to_dict(self) -> dict:
        return {
            "actor": self.actor_name,
            "animation": self.animation_name,
            "action": self.action.to_dict(),
        }
