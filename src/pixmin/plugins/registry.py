"""Plugin registry mapping plugin names to transformation factories."""

from __future__ import annotations

from dataclasses import dataclass, field
from importlib.metadata import entry_points
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Union

from pixmin.errors import ConfigurationError, EmptyPluginChainError, PluginNotFoundError
from pixmin.utils import DEFAULT_PLUGINS, LogLevel, logger
from pixmin.utils.constants import PLUGIN_ENTRY_POINT_GROUP

Transform = Callable[[bytes], bytes]
PluginFactory = Callable[..., Transform]


def _coerce(value: str) -> Any:
    lowered = value.lower()
    if lowered in {"true", "yes", "on"}:
        return True
    if lowered in {"false", "no", "off"}:
        return False
    try:
        return int(value)
    except ValueError:
        return value


@dataclass(frozen=True)
class PluginSpec:
    """A plugin name plus the keyword options passed to its factory."""

    name: str
    options: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def parse(cls, text: str) -> "PluginSpec":
        """Parse ``name`` or ``name:key=value,key2=value2``."""
        name, _, raw_options = text.partition(":")
        name = name.strip()
        if not name:
            raise ConfigurationError(f"Invalid plugin specification: {text!r}")

        options: Dict[str, Any] = {}
        for item in filter(None, (part.strip() for part in raw_options.split(","))):
            key, sep, value = item.partition("=")
            if not sep or not key.strip():
                raise ConfigurationError(f"Invalid option {item!r} for plugin {name}; expected key=value")
            options[key.strip().replace("-", "_")] = _coerce(value.strip())
        return cls(name=name, options=options)


@dataclass(frozen=True)
class PluginHandle:
    """A resolved, ready-to-call transformation."""

    name: str
    transform: Transform

    def __call__(self, data: bytes) -> bytes:
        return self.transform(data)


class PluginRegistry:
    def __init__(self, entry_point_group: Optional[str] = PLUGIN_ENTRY_POINT_GROUP) -> None:
        self._factories: Dict[str, PluginFactory] = {}
        self._entry_point_group = entry_point_group

    def register(self, name: str, factory: PluginFactory, replace: bool = False) -> None:
        if name in self._factories and not replace:
            raise ValueError(f"Plugin already registered: {name}")
        self._factories[name] = factory

    def names(self) -> List[str]:
        return sorted(self._factories)

    def __contains__(self, name: str) -> bool:
        return name in self._factories

    def _load_entry_point(self, name: str) -> Optional[PluginFactory]:
        """Look for an installed distribution advertising `name` under the plugin group."""
        if not self._entry_point_group:
            return None
        for ep in entry_points(group=self._entry_point_group):
            if ep.name != name:
                continue
            try:
                factory = ep.load()
            except (ImportError, AttributeError) as e:
                logger.log("plugins.entry_point_failed", LogLevel.WARN, plugin=name, error=str(e))
                return None
            self._factories[name] = factory
            logger.log("plugins.entry_point_loaded", LogLevel.DEBUG, plugin=name, target=ep.value)
            return factory
        return None

    def get_factory(self, name: str) -> PluginFactory:
        factory = self._factories.get(name) or self._load_entry_point(name)
        if factory is None:
            raise PluginNotFoundError(name)
        return factory

    def create(self, spec: PluginSpec) -> PluginHandle:
        factory = self.get_factory(spec.name)
        try:
            transform = factory(**spec.options)
        except TypeError as e:
            raise ConfigurationError(f"Invalid options for plugin {spec.name}: {e}") from e
        return PluginHandle(spec.name, transform)


REGISTRY = PluginRegistry()


def resolve_plugins(
        requested: Optional[Sequence[Union[str, PluginSpec]]] = None,
        registry: Optional[PluginRegistry] = None,
        defaults: Iterable[str] = DEFAULT_PLUGINS,
) -> List[PluginHandle]:
    """
    Resolve plugin names (or specs) into handles, preserving their order.

    Each plugin's output feeds the next plugin's input, so the returned list is
    applied front to back. When nothing is requested the default list is used.

    Raises:
        PluginNotFoundError: A name is neither registered nor installed.
        PluginUnavailableError: A plugin's backing executable is missing.
        EmptyPluginChainError: The chain would be empty.
    """
    registry = registry or REGISTRY
    specs = list(requested) if requested else list(defaults)
    if not specs:
        raise EmptyPluginChainError()

    handles = []
    for spec in specs:
        if isinstance(spec, str):
            spec = PluginSpec.parse(spec)
        handles.append(registry.create(spec))

    logger.log("plugins.resolved", LogLevel.DEBUG, plugins=",".join(h.name for h in handles))
    return handles
