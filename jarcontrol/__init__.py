"""
jarcontrol package.

A file-driven remote control for a live scene: descriptor files dropped into a
watched directory are decoded, resolved to one of a small fixed set of actors
and applied as animation, transform, camera and recording changes.  The
rendering engine and video encoder live outside this package and are reached
through the capability protocols in :mod:`jarcontrol.scene.interfaces`.
"""

from __future__ import annotations

__all__ = [
    "JarControlError",
    "ConfigurationError",
]


class JarControlError(RuntimeError):
    """Base class for controller errors."""


class ConfigurationError(JarControlError):
    """Raised when the controller configuration cannot be used."""
