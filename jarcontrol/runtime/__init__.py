"""
Runtime adapters bridging the controller to native media backends.
"""

from __future__ import annotations

from .gst_recorder import GstRecorder

__all__ = [
    "GstRecorder",
]
