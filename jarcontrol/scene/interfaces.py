"""
Capability protocols for the externally owned scene.

The controller never renders, animates or encodes anything itself.  It drives
whatever engine binding is plugged in through these narrow interfaces.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Protocol, Tuple, runtime_checkable

from .. import JarControlError


@dataclass(frozen=True, slots=True)
class Vec3:
    """Immutable float triple used for positions and Euler angles (degrees)."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def of(cls, values: Iterable[float]) -> "Vec3":
        x, y, z = (float(value) for value in values)
        return cls(x, y, z)

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def to_dict(self) -> dict:
        return {"x": float(self.x), "y": float(self.y), "z": float(self.z)}


class RecorderError(JarControlError):
    """Raised when the video recorder fails to start or stop."""


class RecorderUnavailableError(RecorderError):
    """Raised when a recorder cannot be constructed or prepared at all."""


@runtime_checkable
class Animator(Protocol):
    def set_trigger(self, name: str, active: bool) -> None:
        ...


@runtime_checkable
class Transform(Protocol):
    @property
    def world_position(self) -> Vec3:
        ...

    @property
    def world_rotation(self) -> Vec3:
        ...

    def set_world_position(self, value: Vec3) -> None:
        ...

    def set_world_rotation(self, value: Vec3) -> None:
        ...


@runtime_checkable
class Recorder(Protocol):
    @property
    def is_recording(self) -> bool:
        ...

    def prepare(self) -> None:
        ...

    def start(self) -> None:
        ...

    def stop(self) -> None:
        ...
