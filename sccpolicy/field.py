"""Field paths and validation errors for security context checks."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorType(str, Enum):
    """The kind of a validation error."""

    REQUIRED = "Required value"
    INVALID = "Invalid value"
    FORBIDDEN = "Forbidden"


class Path:
    """An immutable path to a field in an object, such as ``spec.volumes[0]``."""

    __slots__ = ("_segments",)

    def __init__(self, *names: str) -> None:
        self._segments: tuple[tuple[bool, str], ...] = tuple((True, name) for name in names)

    @classmethod
    def _from_segments(cls, segments: tuple[tuple[bool, str], ...]) -> Path:
        path = cls()
        path._segments = segments
        return path

    def child(self, *args: str) -> Path:
        """Return a new path with one or more named fields appended."""
        if not args:
            raise TypeError("child requires at least one field name")
        return Path._from_segments(self._segments + tuple((True, name) for name in args))

    def index(self, i: int) -> Path:
        """Return a new path addressing element ``i`` of a list."""
        return Path._from_segments(self._segments + ((False, str(i)),))

    def key(self, k: str) -> Path:
        """Return a new path addressing key ``k`` of a map."""
        return Path._from_segments(self._segments + ((False, k),))

    def __str__(self) -> str:
        if not self._segments:
            return "<nil>"
        parts: list[str] = []
        for is_name, text in self._segments:
            if is_name:
                if parts:
                    parts.append(".")
                parts.append(text)
            else:
                parts.append(f"[{text}]")
        return "".join(parts)

    def __repr__(self) -> str:
        return f"Path({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Path):
            return NotImplemented
        return self._segments == other._segments

    def __hash__(self) -> int:
        return hash(self._segments)


def _format_value(value: Any) -> str:
    if value is None:
        return '"null"'
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return json.dumps(str(value), ensure_ascii=False)
    return repr(value)


@dataclass(frozen=True)
class FieldError:
    """A single validation failure on a field."""

    type: ErrorType
    field: str
    bad_value: Any = None
    detail: str = ""

    def __str__(self) -> str:
        if self.type is ErrorType.INVALID:
            body = f"{self.type.value}: {_format_value(self.bad_value)}"
        else:
            body = self.type.value
        if self.detail:
            body += f": {self.detail}"
        return f"{self.field}: {body}"


def _field_name(path: Path | None) -> str:
    return str(path) if path is not None else "<nil>"


def required(path: Path | None, detail: str) -> FieldError:
    """Report that a required field is missing."""
    return FieldError(ErrorType.REQUIRED, _field_name(path), "", detail)


def invalid(path: Path | None, value: Any, detail: str) -> FieldError:
    """Report that a field holds a value that is not allowed."""
    return FieldError(ErrorType.INVALID, _field_name(path), value, detail)


def forbidden(path: Path | None, detail: str) -> FieldError:
    """Report that a field may not be used."""
    return FieldError(ErrorType.FORBIDDEN, _field_name(path), "", detail)