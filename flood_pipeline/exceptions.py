"""Exceptions raised by the flood-control project pipeline.

Every error here stops the run. Nothing is retried and no partial set of
reports is written, so callers either get all four artifacts or an exception
derived from FloodPipelineError.

Hierarchy:
    FloodPipelineError
    ├── InputError            unreadable or empty input file
    ├── ValidationError
    │   ├── SchemaError       header / FundingYear problems
    │   └── RangeError        year window violated after filtering
    ├── ConfigurationError    bad YAML or settings
    └── OutputError           artifact could not be written

Each subclass carries a default component and ErrorCode, both of which can be
overridden per raise:

    raise SchemaError(
        "Missing required columns: Province",
        operation="validate_schema",
        details={"missing_columns": ["Province"]},
    )
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Numeric codes attached to pipeline errors.

    1xxx settings, 2xxx input data, 4xxx filesystem.
    """

    CONFIG_LOAD_FAILED = 1001
    CONFIG_VALIDATION_FAILED = 1002

    VALIDATION_FAILED = 2001
    SCHEMA_MISMATCH = 2003
    VALUE_OUT_OF_RANGE = 2004

    FILE_NOT_FOUND = 4001
    FILE_READ_FAILED = 4002
    FILE_WRITE_FAILED = 4003


def _merge_details(kwargs: dict[str, Any], **extra: Any) -> dict[str, Any]:
    """Fold keyword context (file_path, config_key, ...) into ``details``."""
    details = dict(kwargs.pop("details", None) or {})
    details.update({key: value for key, value in extra.items() if value is not None})
    kwargs["details"] = details
    return kwargs


class FloodPipelineError(Exception):
    """Root of the pipeline's exception tree.

    Attributes:
        message: Text naming the rule that was broken
        component: Where it failed, e.g. "validator.schema"
        operation: Function that raised, e.g. "validate_schema"
        details: Structured context for logs
        status_code: ErrorCode, or None for the bare base class
        cause: Wrapped lower-level exception, if any
    """

    default_code: ErrorCode | None = None
    default_component: str | None = None

    def __init__(
        self,
        message: str,
        component: str | None = None,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
        status_code: ErrorCode | None = None,
        cause: Exception | None = None,
    ):
        self.message = message
        self.operation = operation
        self.details = details or {}
        self.cause = cause
        self.status_code = status_code if status_code is not None else self.default_code

        named_component = component or self.default_component
        self.component = named_component or type(self).__module__

        suffix = []
        if named_component:
            suffix.append(f"[component={named_component}]")
        if operation:
            suffix.append(f"[operation={operation}]")
        if self.status_code is not None:
            suffix.append(f"[code={int(self.status_code)}]")
        super().__init__(" ".join([message, *suffix]))

    def to_dict(self) -> dict[str, Any]:
        """Flatten the error into fields suitable for ``logger.bind``."""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "component": self.component,
            "operation": self.operation,
            "details": self.details,
            "status_code": int(self.status_code) if self.status_code is not None else None,
            "cause": None if self.cause is None else str(self.cause),
        }


class InputError(FloodPipelineError):
    """The input CSV is missing, a directory, empty, or has no data rows."""

    default_code = ErrorCode.FILE_READ_FAILED
    default_component = "extractor.projects_csv"

    def __init__(self, message: str, file_path: str | None = None, **kwargs: Any):
        super().__init__(message, **_merge_details(kwargs, file_path=file_path))


class ValidationError(FloodPipelineError):
    """The data breaks a rule. Fix it in the source file and rerun."""

    default_code = ErrorCode.VALIDATION_FAILED


class SchemaError(ValidationError):
    """Header or FundingYear content does not match the expected schema.

    Covers zero columns, duplicate header names, missing required columns, and
    FundingYear values that are non-numeric or fractional.
    """

    default_code = ErrorCode.SCHEMA_MISMATCH
    default_component = "validator.schema"


class RangeError(ValidationError):
    """FundingYear values outside the reporting window survived the filter."""

    default_code = ErrorCode.VALUE_OUT_OF_RANGE
    default_component = "validator.year_filter"

    def __init__(
        self,
        message: str,
        invalid_values: list[Any] | None = None,
        allowed_values: list[Any] | None = None,
        **kwargs: Any,
    ):
        kwargs = _merge_details(
            kwargs, invalid_values=invalid_values, allowed_values=allowed_values
        )
        super().__init__(message, **kwargs)


class ConfigurationError(FloodPipelineError):
    """Settings could not be read or failed validation."""

    default_code = ErrorCode.CONFIG_VALIDATION_FAILED
    default_component = "config"

    def __init__(self, message: str, config_key: str | None = None, **kwargs: Any):
        super().__init__(message, **_merge_details(kwargs, config_key=config_key))


class OutputError(FloodPipelineError):
    """An artifact could not be written. Whatever was there before is untouched."""

    default_code = ErrorCode.FILE_WRITE_FAILED
    default_component = "filesystem"

    def __init__(self, message: str, file_path: str | None = None, **kwargs: Any):
        super().__init__(message, **_merge_details(kwargs, file_path=file_path))


def wrap_exception(
    original: Exception,
    error_class: type[FloodPipelineError],
    message: str | None = None,
    **kwargs: Any,
) -> FloodPipelineError:
    """Re-raise a library error as one of ours, keeping it as ``cause``.

        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise wrap_exception(e, InputError, file_path=str(path)) from e
    """
    return error_class(message if message else str(original), cause=original, **kwargs)


def get_error_code(exc: Exception) -> int | None:
    """Numeric ErrorCode of ``exc``, or None for foreign or uncoded errors."""
    if not isinstance(exc, FloodPipelineError) or exc.status_code is None:
        return None
    return int(exc.status_code)
