# src/timber/telemetry/sinks/options.py
"""Option models for the built-in sinks.

Settings files pass sink options as a plain mapping (SinkSettings.options).
Each built-in sink validates that mapping against one of these models, and
parse_sink_options() turns pydantic's report into a TelemetrySinkError
naming the sink.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal, TypeVar

from pydantic import BaseModel, Field, StrictBool, ValidationError

from timber.telemetry.errors import TelemetrySinkError

OptionsT = TypeVar("OptionsT", bound=BaseModel)


class ConsoleSinkOptions(BaseModel):
    """Options for ConsoleSink."""

    model_config = {"frozen": True, "extra": "forbid"}

    format: Literal["json", "pretty"] = "json"
    output: Literal["stdout", "stderr"] = "stdout"


class LoggerSinkOptions(BaseModel):
    """Options for LoggerSink."""

    model_config = {"frozen": True, "extra": "forbid"}

    logger_name: str = Field(default="timber.telemetry.events", min_length=1)
    include_properties: StrictBool = True


def parse_sink_options(sink_name: str, model: type[OptionsT], config: Mapping[str, Any]) -> OptionsT:
    """Validate raw sink options.

    Raises:
        TelemetrySinkError: Listing every invalid or unknown option
    """
    try:
        return model.model_validate(dict(config))
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'options'}: {error['msg']}" for error in e.errors()
        )
        raise TelemetrySinkError(sink_name, f"Invalid options ({problems})") from e
