"""Exception hierarchy for subconv."""

from __future__ import annotations


class SubconvError(Exception):
    """Base class for every error raised by subconv."""


class ValidationError(SubconvError, ValueError):
    """Raised when a rule input has a field of unexpected shape or type."""

    def __init__(
        self, message: str, *, outbound: str | None = None, field: str | None = None
    ) -> None:
        self.outbound = outbound
        self.field = field
        location = ", ".join(
            part
            for part in (
                f"outbound={outbound!r}" if outbound is not None else "",
                f"field={field!r}" if field is not None else "",
            )
            if part
        )
        super().__init__(f"{message} ({location})" if location else message)


class ConfigError(SubconvError, ValueError):
    """Raised when a build request file is malformed."""


class InternalInvariantViolation(SubconvError, RuntimeError):  # noqa: N818
    """Raised when provider key derivation yields a collision."""


class UnsupportedConstructWarning(UserWarning):
    """A backend cannot express a matcher value; the emitter skipped it."""

    def __init__(self, backend: str, construct: str, value: str) -> None:
        self.backend = backend
        self.construct = construct
        self.value = value
        super().__init__(f"{construct} not supported by {backend}, skipped: {value}")
