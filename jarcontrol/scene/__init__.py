"""
Scene capabilities consumed by the controller.

:mod:`.interfaces` declares the protocols an engine binding has to satisfy;
:mod:`.objects` and :mod:`.scene` provide the in-memory implementation used by
the headless host and the test-suite.
"""

from __future__ import annotations

__all__ = [
    "Animator",
    "Recorder",
    "RecorderError",
    "RecorderUnavailableError",
    "Scene",
    "SceneAnimator",
    "SceneTransform",
    "Transform",
    "Vec3",
]

from .interfaces import (
    Animator,
    Recorder,
    RecorderError,
    RecorderUnavailableError,
    Transform,
    Vec3,
)
from .objects import SceneAnimator, SceneTransform
from .scene import Scene
