"""
Descriptor codec.

:func:`decode` turns descriptor text into an :class:`EventDescriptor` and
raises a :class:`DecodeError` subclass on bad input.  :func:`parse` is the
non-raising variant used at the watcher boundary.
"""

from __future__ import annotations

import json
from typing import Union

from pydantic import ValidationError

from . import JarControlError
from .events import Action, EventDescriptor, MoveAction, NoAction, RecordAction
from .scene.interfaces import Vec3
from .schemas import (
    DescriptorModel,
    EventTypeName,
    JarEventModel,
    MoveParamsModel,
    RotateParamsModel,
)


class DecodeError(JarControlError):
    """Base class for descriptor decoding errors."""


class EmptyPayload(DecodeError):
    """Raised when the descriptor text is empty or whitespace only."""

    def __init__(self) -> None:
        super().__init__("descriptor payload is empty")


class MalformedPayload(DecodeError):
    """Raised when the descriptor text is not a valid event document."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"malformed descriptor: {detail}")
        self.detail = detail


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ())) or "<root>"
        parts.append(f"{location}: {error.get('msg')}")
    return "; ".join(parts)


def _move_action(event: JarEventModel) -> MoveAction:
    if event.moveParams is not None:
        params = event.moveParams
        translation = Vec3(params.movePosX, params.movePosY, params.movePosZ)
        do_translate = bool(event.doMove)
    else:
        translation = Vec3(event.movePosX or 0.0, event.movePosY or 0.0, event.movePosZ or 0.0)
        # Inline coordinates without a doMove flag always moved the actor.
        do_translate = event.doMove if event.doMove is not None else event.has_inline_move

    rotate = event.rotateParams or RotateParamsModel()
    return MoveAction(
        do_translate=bool(do_translate),
        translation=translation,
        do_rotate=bool(event.doRotate),
        rotation_euler=Vec3(rotate.rotX, rotate.rotY, rotate.rotZ),
    )


def _action_from_model(event: JarEventModel | None) -> Action:
    if event is None or event.eventType is EventTypeName.IGNORE:
        return NoAction()
    if event.eventType is EventTypeName.MOVE:
        return _move_action(event)
    return RecordAction(start=bool(event.startRecording))


def decode(raw: str) -> EventDescriptor:
    if raw is None or not str(raw).strip():
        raise EmptyPayload()

    try:
        payload = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise MalformedPayload(f"not valid JSON ({exc})") from exc

    if not isinstance(payload, dict):
        raise MalformedPayload(f"expected a JSON object, got {type(payload).__name__}")

    try:
        # Strict models accept nested objects only when validating JSON input.
        model = DescriptorModel.model_validate_json(raw)
    except ValidationError as exc:
        raise MalformedPayload(_format_validation_error(exc)) from exc

    return EventDescriptor(
        actor_name=model.character,
        animation_name=model.animation,
        action=_action_from_model(model.jarEvent),
    )


def parse(raw: str) -> Union[EventDescriptor, DecodeError]:
    """
    Decode ``raw`` without raising; a failure is returned as the error itself.
    """

    try:
        return decode(raw)
    except DecodeError as exc:
        return exc


def encode(descriptor: EventDescriptor) -> str:
    """
    Render ``descriptor`` in the wire format understood by :func:`decode`.
    """

    action = descriptor.action
    event = JarEventModel()
    if isinstance(action, MoveAction):
        event = JarEventModel(
            eventType=EventTypeName.MOVE,
            doMove=action.do_translate,
            doRotate=action.do_rotate,
            moveParams=MoveParamsModel(
                movePosX=action.translation.x,
                movePosY=action.translation.y,
                movePosZ=action.translation.z,
            ),
            rotateParams=RotateParamsModel(
                rotX=action.rotation_euler.x,
                rotY=action.rotation_euler.y,
                rotZ=action.rotation_euler.z,
            ),
        )
    elif isinstance(action, RecordAction):
        event = JarEventModel(eventType=EventTypeName.RECORD, startRecording=action.start)

    model = DescriptorModel(
        character=descriptor.actor_name,
        animation=descriptor.animation_name,
        jarEvent=event,
    )
    return model.model_dump_json(exclude_none=True)
