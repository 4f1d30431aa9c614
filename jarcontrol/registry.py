"""
Static actor registry.

Resolved once at startup from the configured bindings; afterwards the set of
known actors never changes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Mapping, TYPE_CHECKING

from . import ConfigurationError, JarControlError
from .scene.interfaces import Animator, Transform

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from .config import ActorBinding
    from .scene import Scene

LOG = logging.getLogger(__name__)


class UnknownActorError(JarControlError, LookupError):
    """Raised when a descriptor names an actor that is not configured."""

    def __init__(self, name: str) -> None:
        super().__init__(f"unknown actor '{name}'")
        self.name = name


@dataclass(frozen=True)
class ActorRegistryEntry:
    name: str
    transform: Transform
    animator: Animator
    camera_focus: Transform


class ActorRegistry:
    def __init__(self, entries: Iterable[ActorRegistryEntry]) -> None:
        self._entries: Dict[str, ActorRegistryEntry] = {}
        for entry in entries:
            if entry.name in self._entries:
                raise ConfigurationError(f"Actor '{entry.name}' is registered twice")
            self._entries[entry.name] = entry

    @classmethod
    def from_bindings(cls, bindings: Mapping[str, "ActorBinding"], scene: "Scene") -> "ActorRegistry":
        """
        Bind every configured actor to its scene objects.

        A binding naming an object the scene does not have is a configuration
        error; it is reported here rather than on the first descriptor.
        """

        entries: List[ActorRegistryEntry] = []
        for name, binding in bindings.items():
            try:
                entry = ActorRegistryEntry(
                    name=name,
                    transform=scene.transform(binding.transform),
                    animator=scene.animator(binding.animator),
                    camera_focus=scene.transform(binding.camera_focus),
                )
            except KeyError as exc:
                raise ConfigurationError(
                    f"Actor '{name}' references missing scene object {exc}"
                ) from exc
            entries.append(entry)
        LOG.debug("Registered actors: %s", ", ".join(sorted(name for name in bindings)))
        return cls(entries)

    def resolve(self, name: str) -> ActorRegistryEntry:
        try:
            return self._entries[name]
        except KeyError:
            raise UnknownActorError(name) from None

    def names(self) -> List[str]:
        return list(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[ActorRegistryEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)
