"""
Named container for the in-memory scene objects.
"""

from __future__ import annotations

from typing import Dict, Optional, TYPE_CHECKING

from .interfaces import Vec3
from .objects import SceneAnimator, SceneTransform

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..config import ControllerConfig


class Scene:
    """
    Lookup table of transforms and animators plus the observing camera.
    """

    def __init__(self, camera_name: str = "main_camera") -> None:
        self.camera = SceneTransform(camera_name)
        self._transforms: Dict[str, SceneTransform] = {camera_name: self.camera}
        self._animators: Dict[str, SceneAnimator] = {}

    @classmethod
    def from_config(cls, config: "ControllerConfig") -> "Scene":
        """
        Create every object referenced by the actor bindings.
        """

        scene = cls(camera_name=config.camera)
        for binding in config.actors.values():
            scene.add_transform(binding.transform)
            scene.add_transform(binding.camera_focus)
            scene.add_animator(binding.animator)
        return scene

    def add_transform(
        self,
        name: str,
        position: Optional[Vec3] = None,
        rotation: Optional[Vec3] = None,
    ) -> SceneTransform:
        existing = self._transforms.get(name)
        if existing is not None:
            return existing
        transform = SceneTransform(name, position or Vec3(), rotation or Vec3())
        self._transforms[name] = transform
        return transform

    def add_animator(self, name: str) -> SceneAnimator:
        existing = self._animators.get(name)
        if existing is not None:
            return existing
        animator = SceneAnimator(name)
        self._animators[name] = animator
        return animator

    def transform(self, name: str) -> SceneTransform:
        return self._transforms[name]

    def animator(self, name: str) -> SceneAnimator:
        return self._animators[name]

    def snapshot(self) -> dict:
        return {
            "camera": self.camera.to_dict(),
            "transforms": {
                name: transform.to_dict()
                for name, transform in self._transforms.items()
                if transform is not self.camera
            },
            "animators": {
                name: animator.active_triggers() for name, animator in self._animators.items()
            },
        }
