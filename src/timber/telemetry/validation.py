# src/timber/telemetry/validation.py
"""Built-in schema validators for telemetry property bags."""

from collections.abc import Iterable, Mapping
from typing import Any

from timber.telemetry.protocols import ValidationResult


class RequiredPropertiesValidator:
    """Checks that every required property is present and not None.

    Example:
        >>> validator = RequiredPropertiesValidator(["tenant_id", "document_id"])
        >>> validator.validate({"tenant_id": "t1"})
        ValidationResult(passed=False, failed_properties=('document_id',))
    """

    def __init__(self, required: Iterable[str] = ()) -> None:
        self._required = tuple(required)

    @property
    def required(self) -> tuple[str, ...]:
        return self._required

    def validate(self, properties: Mapping[str, Any]) -> ValidationResult:
        failed = tuple(key for key in self._required if properties.get(key) is None)
        return ValidationResult(passed=not failed, failed_properties=failed)
