# src/timber/telemetry/factory.py
"""Factory functions for creating a TelemetryManager from configuration.

This module is the glue between TelemetrySettings and a configured
TelemetryManager:
1. Collecting sink classes from timber_get_sinks hooks into a SinkRegistry
2. Instantiating and configuring the sinks named in settings
3. Building the schema validator
4. Setting up a fresh manager, or the one supplied (e.g. the shared instance)

Usage:
    from timber.core.config import load_settings
    from timber.telemetry.factory import create_telemetry_manager

    settings = load_settings(Path("timber.yaml"))
    manager = create_telemetry_manager(settings.telemetry)
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

import pluggy
import structlog

from timber.core.config import SinkSettings, TelemetrySettings
from timber.telemetry.errors import TelemetrySinkError
from timber.telemetry.hookspecs import PROJECT_NAME, TimberTelemetrySpec
from timber.telemetry.manager import TelemetryManager
from timber.telemetry.protocols import SinkProtocol
from timber.telemetry.sinks import BuiltinSinksPlugin
from timber.telemetry.validation import RequiredPropertiesValidator

logger = structlog.get_logger(__name__)

_PLUGINS_SOURCE = "telemetry_plugins"


def _sink_name(sink_class: type[SinkProtocol]) -> str:
    """Name under which a sink class is selected in settings.

    A class-level ``_name`` wins; sinks without one are instantiated once and
    asked for their ``name``.
    """
    declared = getattr(sink_class, "_name", None)
    if declared is None:
        try:
            declared = sink_class().name
        except Exception as e:
            raise TelemetrySinkError(
                sink_class.__name__, f"Could not instantiate sink to read its name: {e}"
            ) from e
        attribute = "name"
    else:
        attribute = "_name"

    if not isinstance(declared, str) or not declared:
        raise TelemetrySinkError(
            sink_class.__name__, f"Sink {attribute} must be a non-empty string, got {declared!r}"
        )
    return declared


class SinkRegistry(Mapping[str, type[SinkProtocol]]):
    """Sink classes by configured name, remembering which plugin supplied each."""

    def __init__(self) -> None:
        self._classes: dict[str, type[SinkProtocol]] = {}
        self._sources: dict[str, str] = {}

    @classmethod
    def discover(cls, sink_plugins: Iterable[Any] = ()) -> SinkRegistry:
        """Collect sinks from the built-in plugin and any extra plugin objects.

        Raises:
            TelemetrySinkError: If a plugin does not match the hook spec, a
                hook raises or returns something other than an iterable of
                classes, or two sinks share a name.
        """
        plugin_manager = pluggy.PluginManager(PROJECT_NAME)
        plugin_manager.add_hookspecs(TimberTelemetrySpec)
        for plugin in (BuiltinSinksPlugin(), *sink_plugins):
            try:
                plugin_manager.register(plugin)
                plugin_manager.check_pending()
            except (pluggy.PluginValidationError, ValueError) as e:
                raise TelemetrySinkError(
                    _PLUGINS_SOURCE, f"Invalid telemetry sink plugin {type(plugin).__name__}: {e}"
                ) from e

        registry = cls()
        # Hook implementations are called one by one so errors can name the plugin
        for hook_impl in plugin_manager.hook.timber_get_sinks.get_hookimpls():
            source = type(hook_impl.plugin).__name__
            try:
                provided = hook_impl.function()
            except Exception as e:
                raise TelemetrySinkError(
                    _PLUGINS_SOURCE, f"Telemetry sink plugin {source} failed in timber_get_sinks: {e}"
                ) from e
            if isinstance(provided, str | bytes) or not isinstance(provided, Iterable):
                raise TelemetrySinkError(
                    _PLUGINS_SOURCE,
                    f"timber_get_sinks in plugin {source} returned {type(provided).__name__}; "
                    "expected an iterable of sink classes",
                )
            for sink_class in provided:
                registry.add(sink_class, source)
        return registry

    def add(self, sink_class: type[SinkProtocol], source: str) -> None:
        name = _sink_name(sink_class)
        if name in self._classes:
            raise TelemetrySinkError(
                name,
                f"Duplicate telemetry sink name '{name}': {self._classes[name].__name__} "
                f"from {self._sources[name]} and {sink_class.__name__} from {source}",
            )
        self._classes[name] = sink_class
        self._sources[name] = source

    def source_of(self, name: str) -> str:
        return self._sources[name]

    def build(self, sink_settings: SinkSettings) -> SinkProtocol:
        """Instantiate and configure the sink selected by sink_settings.

        Raises:
            TelemetrySinkError: If the name is unknown or the sink rejects its options
        """
        sink_class = self._classes.get(sink_settings.name)
        if sink_class is None:
            raise TelemetrySinkError(
                sink_settings.name, f"Unknown sink. Available sinks: {sorted(self._classes)}"
            )
        sink = sink_class()
        configure = getattr(sink, "configure", None)
        if configure is not None:
            configure(dict(sink_settings.options))
        elif sink_settings.options:
            raise TelemetrySinkError(sink_settings.name, "Sink does not accept options")
        return sink

    def __getitem__(self, name: str) -> type[SinkProtocol]:
        return self._classes[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._classes)

    def __len__(self) -> int:
        return len(self._classes)


def discover_sink_registry(sink_plugins: Iterable[Any] = ()) -> SinkRegistry:
    """Shorthand for SinkRegistry.discover()."""
    return SinkRegistry.discover(sink_plugins)


def create_telemetry_manager(
    settings: TelemetrySettings,
    *,
    sink_plugins: Iterable[Any] = (),
    manager: TelemetryManager | None = None,
) -> TelemetryManager:
    """Build sinks and validator from settings and set up a manager.

    Args:
        settings: Validated telemetry settings
        sink_plugins: Extra plugin objects providing ``timber_get_sinks``
        manager: Manager to set up. Pass TelemetryManager.instance() to
            configure the shared instance. Defaults to a new manager.

    Returns:
        The configured manager

    Raises:
        TelemetrySinkError: If discovery fails, a sink name is unknown, or a
            sink rejects its options
        EmptySinkListError: If settings list no sinks
        TelemetryAlreadySetupError: If the supplied manager is already set up
    """
    registry = SinkRegistry.discover(sink_plugins)
    sinks = [registry.build(sink_settings) for sink_settings in settings.sinks]
    validator = RequiredPropertiesValidator(settings.property_schema.required_properties)

    target = manager if manager is not None else TelemetryManager()
    target.setup(sinks, validator)
    logger.debug(
        "Telemetry sinks built from settings",
        sinks=[sink.name for sink in sinks],
        required_properties=list(validator.required),
    )
    return target
