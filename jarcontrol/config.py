"""
Controller configuration.

Settings are read from YAML and validated with pydantic.  The lookup order is
an explicit path, then ``$JARCONTROL_CONFIG``, then the packaged
``configs/default.yaml``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from . import ConfigurationError

LOG = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parent / "configs"
DEFAULT_CONFIG_PATH = CONFIG_DIR / "default.yaml"
ENV_CONFIG_VAR = "JARCONTROL_CONFIG"
PATH_KEYS = ("watch_dir", "watchDir", "output_dir", "outputDir")

ROBOT_KYLE = "robot_kyle"
BANANA_MAN = "banana_man"


class ActorBinding(BaseModel):
    """Scene object names bound to one actor."""

    transform: str
    animator: str
    camera_focus: str = Field(alias="cameraFocus")
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("transform", "animator", "camera_focus", mode="before")
    @classmethod
    def _require_name(cls, value: object) -> str:
        result = str(value or "").strip()
        if not result:
            raise ValueError("scene object name is required")
        return result


def default_actor_bindings() -> Dict[str, ActorBinding]:
    return {
        name: ActorBinding(transform=name, animator=name, camera_focus=f"{name}_cam_point")
        for name in (ROBOT_KYLE, BANANA_MAN)
    }


class RecorderSettings(BaseModel):
    source: str = "videotestsrc is-live=true"
    encoder: str = "x264enc tune=zerolatency"
    muxer: str = "mp4mux"
    file_prefix: str = "capture"
    eos_timeout: float = 2.0
    model_config = ConfigDict(populate_by_name=True)

    @field_validator("eos_timeout", mode="before")
    @classmethod
    def _clamp_timeout(cls, value: float) -> float:
        return max(0.0, float(value))


class ControllerConfig(BaseModel):
    watch_dir: Optional[Path] = Field(default=None, alias="watchDir")
    extension: str = ".json"
    poll_interval: float = Field(default=1.0, alias="pollInterval")
    output_dir: Optional[Path] = Field(default=None, alias="outputDir")
    camera: str = "main_camera"
    actors: Dict[str, ActorBinding] = Field(default_factory=default_actor_bindings)
    recorder: RecorderSettings = Field(default_factory=RecorderSettings)
    model_config = ConfigDict(populate_by_name=True)

    @field_validator("watch_dir", "output_dir", mode="before")
    @classmethod
    def _expand_path(cls, value: object) -> Optional[Path]:
        if value is None:
            return None
        text = str(value).strip()
        if not text:
            return None
        return Path(os.path.expandvars(text)).expanduser()

    @field_validator("extension", mode="before")
    @classmethod
    def _normalise_extension(cls, value: object) -> str:
        text = str(value or "").strip().lower()
        if not text:
            raise ValueError("extension is required")
        return text if text.startswith(".") else f".{text}"

    @field_validator("poll_interval")
    @classmethod
    def _validate_interval(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("poll_interval must be positive")
        return value

    @field_validator("actors")
    @classmethod
    def _validate_actors(cls, value: Dict[str, ActorBinding]) -> Dict[str, ActorBinding]:
        if not value:
            raise ValueError("at least one actor binding is required")
        return value


def resolve_config_path(path: Union[str, Path, None] = None) -> Path:
    if path:
        return Path(path).expanduser()
    env_path = os.environ.get(ENV_CONFIG_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH


def anchor_paths(payload: Dict[str, Any], base: Path) -> Dict[str, Any]:
    """Resolve relative directory entries against ``base``; empty values are left alone."""

    anchored = dict(payload)
    for key in PATH_KEYS:
        value = anchored.get(key)
        if value is None:
            continue
        text = str(value).strip()
        if not text:
            continue
        candidate = Path(os.path.expandvars(text)).expanduser()
        if not candidate.is_absolute():
            anchored[key] = str(base / candidate)
    return anchored


def config_from_mapping(payload: Mapping[str, Any], overrides: Optional[Mapping[str, Any]] = None) -> ControllerConfig:
    data = dict(payload or {})
    for key, value in (overrides or {}).items():
        if value is None:
            continue
        field_info = ControllerConfig.model_fields.get(key)
        if field_info is not None and field_info.alias:
            data.pop(field_info.alias, None)
        data[key] = value
    try:
        return ControllerConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid controller configuration: {exc}") from exc


def load_config(
    path: Union[str, Path, None] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> ControllerConfig:
    """
    Load and validate the controller configuration.

    Relative ``watch_dir`` and ``output_dir`` entries in a user config file are
    resolved against the file's directory.  The packaged default and
    ``overrides`` stay relative to the working directory.  ``overrides`` entries
    that are ``None`` are ignored so argparse defaults can be passed through
    unchanged.
    """

    config_path = resolve_config_path(path)
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle) or {}
    except FileNotFoundError as exc:
        raise ConfigurationError(f"Configuration file not found: {config_path}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Configuration file is not valid YAML: {config_path}") from exc

    if not isinstance(payload, dict):
        raise ConfigurationError(f"Configuration root must be a mapping: {config_path}")

    if config_path.resolve() != DEFAULT_CONFIG_PATH:
        payload = anchor_paths(payload, config_path.resolve().parent)

    LOG.debug("Loaded configuration from %s", config_path)
    return config_from_mapping(payload, overrides)
