"""
Per-actor animation bookkeeping.

The tracker only remembers which trigger this controller last switched on for
an actor and works out the minimal stop/start pair for a new request.  Setting
the triggers on the engine is left to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class ActorState:
    active_animation: Optional[str] = None

    def to_dict(self) -> dict:
        return {"activeAnimation": self.active_animation}


@dataclass(frozen=True, slots=True)
class AnimationDiff:
    to_stop: Optional[str] = None
    to_start: Optional[str] = None

    @property
    def is_noop(self) -> bool:
        return self.to_stop is None and self.to_start is None


class AnimationTracker:
    """
    Compute animation transitions.

    Re-requesting the animation that is already active yields an empty diff
    so redundant descriptors never interrupt a running clip.
    """

    def transition(self, state: ActorState, requested: str) -> AnimationDiff:
        previous = state.active_animation
        state.active_animation = requested
        if requested == previous:
            return AnimationDiff()
        return AnimationDiff(to_stop=previous or None, to_start=requested)
