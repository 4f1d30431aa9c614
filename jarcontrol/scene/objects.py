"""
In-memory scene objects.

Light-weight stand-ins for engine-owned transforms and animators.  The
headless host and the tests drive these; an engine binding provides its own
objects satisfying :mod:`jarcontrol.scene.interfaces`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from .interfaces import Vec3

LOG = logging.getLogger(__name__)


@dataclass
class SceneTransform:
    name: str
    position: Vec3 = field(default_factory=Vec3)
    rotation: Vec3 = field(default_factory=Vec3)

    @property
    def world_position(self) -> Vec3:
        return self.position

    @property
    def world_rotation(self) -> Vec3:
        return self.rotation

    def set_world_position(self, value: Vec3) -> None:
        LOG.debug("Transform '%s' position -> %s", self.name, value.as_tuple())
        self.position = value

    def set_world_rotation(self, value: Vec3) -> None:
        LOG.debug("Transform '%s' rotation -> %s", self.name, value.as_tuple())
        self.rotation = value

    def to_dict(self) -> dict:
        return {
            "position": self.position.to_dict(),
            "rotation": self.rotation.to_dict(),
        }


@dataclass
class SceneAnimator:
    """
    Boolean trigger parameters of a single animator.

    ``history`` keeps every call in order so the headless host can report
    exactly what an engine would have received.
    """

    name: str
    parameters: Dict[str, bool] = field(default_factory=dict)
    history: List[Tuple[str, bool]] = field(default_factory=list)

    def set_trigger(self, name: str, active: bool) -> None:
        LOG.debug("Animator '%s' trigger '%s' -> %s", self.name, name, active)
        self.parameters[name] = bool(active)
        self.history.append((name, bool(active)))

    def active_triggers(self) -> List[str]:
        return sorted(key for key, value in self.parameters.items() if value)
