"""Configuration helpers for taskwave projects."""

from __future__ import annotations

import importlib
import pathlib
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, MutableMapping, Optional

import yaml

from .errors import ConfigError
from .tasks.base import TaskStep

__all__ = [
    "ConfigError",
    "ExecutorSpec",
    "NotifierSpec",
    "ProjectConfig",
    "RunSettings",
    "TaskSpec",
    "import_string",
    "instantiate_from_path",
]


@dataclass
class RunSettings:
    """Scheduling parameters for a run."""

    task_timeout: Optional[float] = None
    validate: bool = True
    max_workers: Optional[int] = None
    fallback_agent: Optional[str] = "general-purpose"
    simulated_delay_scale: float = 1.0

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "RunSettings":
        if not data:
            return cls()
        validate = data.get("validate", True)
        if not isinstance(validate, bool):
            raise ConfigError(f"settings.validate must be true or false, got {validate!r}")
        settings = cls(
            task_timeout=_coerce(data, "task_timeout", float),
            validate=validate,
            max_workers=_coerce(data, "max_workers", int),
            fallback_agent=data.get("fallback_agent", "general-purpose"),
            simulated_delay_scale=_coerce(data, "simulated_delay_scale", float, 1.0),
        )
        if settings.task_timeout is not None and settings.task_timeout <= 0:
            raise ConfigError("settings.task_timeout must be positive")
        if settings.max_workers is not None and settings.max_workers < 1:
            raise ConfigError("settings.max_workers must be at least 1")
        if settings.simulated_delay_scale < 0:
            raise ConfigError("settings.simulated_delay_scale cannot be negative")
        return settings


@dataclass
class NotifierSpec:
    """Import path and constructor arguments for a notifier."""

    type: str
    params: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "NotifierSpec":
        if not isinstance(data, Mapping) or "type" not in data:
            raise ConfigError("Notifier requires a type path")
        return cls(type=str(data["type"]), params=dict(data.get("params", {})))


@dataclass
class ExecutorSpec:
    """Import path and constructor arguments for the executor of one agent type."""

    agent_type: str
    type: str
    params: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, agent_type: str, data: Mapping[str, Any]) -> "ExecutorSpec":
        if "type" not in data:
            raise ConfigError(f"Executor '{agent_type}' requires a type path")
        return cls(agent_type=agent_type, type=str(data["type"]), params=dict(data.get("params", {})))


@dataclass
class TaskSpec:
    """Represents a task entry of the configuration file."""

    id: str
    agent: str
    name: str = ""
    description: str = ""
    depends_on: List[str] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TaskSpec":
        if not isinstance(data, Mapping):
            raise ConfigError(f"Task entries must be mappings, got {type(data).__name__}")
        missing = [key for key in ("id", "agent") if key not in data]
        if missing:
            raise ConfigError(f"Task is missing required keys: {', '.join(missing)}")
        raw_depends = data.get("depends_on") or []
        if isinstance(raw_depends, str):
            depends_on = [raw_depends]
        else:
            depends_on = [str(item) for item in raw_depends]
        return cls(
            id=str(data["id"]),
            agent=str(data["agent"]),
            name=str(data.get("name") or data["id"]),
            description=str(data.get("description") or ""),
            depends_on=depends_on,
        )

    def to_task(self) -> TaskStep:
        return TaskStep(
            id=self.id,
            name=self.name,
            description=self.description,
            agent_type=self.agent,
            dependencies=self.depends_on,
        )


@dataclass
class ProjectConfig:
    """Representation of the YAML configuration."""

    name: str
    description: Optional[str]
    settings: RunSettings
    tasks: List[TaskSpec]
    notifiers: List[NotifierSpec] = field(default_factory=list)
    executor_specs: Dict[str, ExecutorSpec] = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str | pathlib.Path) -> "ProjectConfig":
        path = pathlib.Path(path)
        try:
            text = path.read_text()
        except OSError as exc:
            raise ConfigError(f"Cannot read configuration {path}: {exc}") from exc
        return cls.from_yaml(text, default_name=path.stem)

    @classmethod
    def from_yaml(cls, text: str, *, default_name: str = "project") -> "ProjectConfig":
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Configuration is not valid YAML: {exc}") from exc
        if not isinstance(data, MutableMapping):
            raise ConfigError("Configuration root must be a mapping")
        return cls.from_mapping(data, default_name=default_name)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, default_name: str = "project") -> "ProjectConfig":
        tasks = [TaskSpec.from_mapping(item) for item in data.get("tasks") or []]
        if not tasks:
            raise ConfigError("At least one task must be defined")
        raw_notifiers = ensure_iterable(data.get("notifier") or data.get("notifiers"))
        executor_specs = {
            name: ExecutorSpec.from_mapping(name, info)
            for name, info in (data.get("executors") or {}).items()
        }
        return cls(
            name=str(data.get("name", default_name)),
            description=data.get("description"),
            settings=RunSettings.from_mapping(data.get("settings")),
            tasks=tasks,
            notifiers=[NotifierSpec.from_mapping(item) for item in raw_notifiers],
            executor_specs=executor_specs,
        )


def import_string(path: str) -> Any:
    """Return attribute from module specified by path "module:qualname"."""

    if ":" not in path:
        raise ConfigError(f"Import path '{path}' must use module:qualname format")
    module_path, attr = path.split(":", 1)
    try:
        module = importlib.import_module(module_path)
    except ImportError as exc:
        raise ConfigError(f"Cannot import module '{module_path}': {exc}") from exc
    target: Any = module
    try:
        for part in attr.split("."):
            target = getattr(target, part)
    except AttributeError as exc:
        raise ConfigError(f"Module '{module_path}' has no attribute '{attr}'") from exc
    return target


def instantiate_from_path(path: str, *args: Any, **kwargs: Any) -> Any:
    """Import and instantiate a class given its dotted path."""

    cls = import_string(path)
    return cls(*args, **kwargs)


def ensure_iterable(value: Any) -> Iterable[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return value
    return [value]


def _coerce(data: Mapping[str, Any], key: str, kind: type, default: Any = None) -> Any:
    value = data.get(key)
    if value is None:
        return default
    try:
        return kind(value)
    except (TypeError, ValueError) as exc:
        expected = "an integer" if kind is int else "a number"
        raise ConfigError(f"settings.{key} must be {expected}, got {value!r}") from exc
