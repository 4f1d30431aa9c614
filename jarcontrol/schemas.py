"""
Pydantic schemas mirroring the descriptor file format.

Field names follow the wire format produced by the external producer, so they
stay in camelCase here and nowhere else.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EventTypeName(str, Enum):
    IGNORE = "IgnoreEvent"
    MOVE = "MoveEvent"
    RECORD = "RecordEvent"


# Producers serialising the enum by ordinal use this order.
EVENT_TYPE_ORDER = (EventTypeName.IGNORE, EventTypeName.MOVE, EventTypeName.RECORD)

# Wire values are taken as sent: no string or bool coercion, no NaN or Infinity.
STRICT_WIRE_CONFIG = ConfigDict(strict=True, allow_inf_nan=False, extra="ignore")


class MoveParamsModel(BaseModel):
    movePosX: float = 0.0
    movePosY: float = 0.0
    movePosZ: float = 0.0
    model_config = STRICT_WIRE_CONFIG


class RotateParamsModel(BaseModel):
    rotX: float = 0.0
    rotY: float = 0.0
    rotZ: float = 0.0
    model_config = STRICT_WIRE_CONFIG


class JarEventModel(BaseModel):
    eventType: EventTypeName = Field(default=EventTypeName.IGNORE, strict=False)
    startRecording: bool = False
    doMove: Optional[bool] = None
    doRotate: bool = False
    moveParams: Optional[MoveParamsModel] = None
    rotateParams: Optional[RotateParamsModel] = None
    # First revision of the format kept the move target inline.
    movePosX: Optional[float] = None
    movePosY: Optional[float] = None
    movePosZ: Optional[float] = None
    model_config = STRICT_WIRE_CONFIG

    @field_validator("eventType", mode="before")
    @classmethod
    def _coerce_event_type(cls, value: object) -> object:
        if value is None:
            return EventTypeName.IGNORE
        if isinstance(value, bool):
            raise ValueError("eventType must be a name or an index")
        if isinstance(value, int):
            if 0 <= value < len(EVENT_TYPE_ORDER):
                return EVENT_TYPE_ORDER[value]
            raise ValueError(f"eventType index {value} is out of range")
        if isinstance(value, str):
            candidate = value.strip()
            for member in EventTypeName:
                if member.value.lower() == candidate.lower():
                    return member
        return value

    @property
    def has_inline_move(self) -> bool:
        return any(axis is not None for axis in (self.movePosX, self.movePosY, self.movePosZ))


class DescriptorModel(BaseModel):
    character: str
    animation: str
    jarEvent: Optional[JarEventModel] = Field(default=None)
    model_config = STRICT_WIRE_CONFIG

    @field_validator("character")
    @classmethod
    def _validate_character(cls, value: str) -> str:
        result = value.strip()
        if not result:
            raise ValueError("character is required")
        return result

    @field_validator("animation")
    @classmethod
    def _validate_animation(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("animation is required")
        return value
