"""Strategies that decide which user id a container runs as."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from .field import FieldError, Path, invalid, required
from .models import (
    Container,
    Pod,
    RunAsUserStrategyOptions,
    RunAsUserStrategyType,
    StrategyConfigError,
)


def _child(path: Path | None, name: str) -> Path:
    return (path if path is not None else Path()).child(name)


class RunAsUserStrategy(ABC):
    """Generates and validates the user id of a container."""

    @abstractmethod
    def generate(self, pod: Pod | None, container: Container | None) -> int | None:
        """Return the uid to use, or None when the strategy leaves it unset."""

    @abstractmethod
    def validate(
        self,
        fld_path: Path | None,
        pod: Pod | None,
        container: Container | None,
        run_as_non_root: bool | None,
        run_as_user: int | None,
    ) -> list[FieldError]:
        """Return the errors found in the given settings."""


class MustRunAs(RunAsUserStrategy):
    """Requires the container to run as one specific uid."""

    def __init__(self, options: RunAsUserStrategyOptions | None) -> None:
        if options is None:
            raise StrategyConfigError("MustRunAs requires run as user options")
        if options.uid is None:
            raise StrategyConfigError("MustRunAs requires a UID")
        self._options = options

    def generate(self, pod, container):
        return self._options.uid

    def validate(self, fld_path, pod, container, run_as_non_root, run_as_user):
        path = _child(fld_path, "runAsUser")
        if run_as_user is None:
            return [required(path, "")]
        if run_as_user != self._options.uid:
            return [invalid(path, run_as_user, f"must be: {self._options.uid}")]
        return []


class MustRunAsRange(RunAsUserStrategy):
    """Requires the container to run as a uid within a range."""

    def __init__(self, options: RunAsUserStrategyOptions | None) -> None:
        if options is None:
            raise StrategyConfigError("MustRunAsRange requires run as user options")
        if options.uid_range_min is None:
            raise StrategyConfigError("MustRunAsRange requires a UIDRangeMin")
        if options.uid_range_max is None:
            raise StrategyConfigError("MustRunAsRange requires a UIDRangeMax")
        self._options = options

    def generate(self, pod, container):
        return self._options.uid_range_min

    def validate(self, fld_path, pod, container, run_as_non_root, run_as_user):
        path = _child(fld_path, "runAsUser")
        if run_as_user is None:
            return [required(path, "")]
        low, high = self._options.uid_range_min, self._options.uid_range_max
        if not low <= run_as_user <= high:
            return [invalid(path, run_as_user, f"must be in the ranges: [{low}, {high}]")]
        return []


class RunAsNonRoot(RunAsUserStrategy):
    """Allows any uid except root; the image may supply the uid."""

    def __init__(self, options: RunAsUserStrategyOptions | None = None) -> None:
        self._options = options

    def generate(self, pod, container):
        return None

    def validate(self, fld_path, pod, container, run_as_non_root, run_as_user):
        if run_as_non_root is None and run_as_user is None:
            return [required(_child(fld_path, "runAsNonRoot"), "must be true")]
        if run_as_non_root is False:
            return [invalid(_child(fld_path, "runAsNonRoot"), False, "must be true")]
        if run_as_user == 0:
            return [
                invalid(_child(fld_path, "runAsUser"), 0, "running with the root UID is forbidden")
            ]
        return []


class RunAsAny(RunAsUserStrategy):
    """Places no restriction on the uid."""

    def __init__(self, options: RunAsUserStrategyOptions | None = None) -> None:
        self._options = options

    def generate(self, pod, container):
        return None

    def validate(self, fld_path, pod, container, run_as_non_root, run_as_user):
        return []


def _type_name(value: Any) -> str:
    return str(getattr(value, "value", value))


def create_user_strategy(options: RunAsUserStrategyOptions) -> RunAsUserStrategy:
    """Build the strategy named by ``options.type``."""
    kind = options.type
    if kind == RunAsUserStrategyType.MUST_RUN_AS:
        return MustRunAs(options)
    if kind == RunAsUserStrategyType.MUST_RUN_AS_RANGE:
        return MustRunAsRange(options)
    if kind == RunAsUserStrategyType.MUST_RUN_AS_NON_ROOT:
        return RunAsNonRoot(options)
    if kind == RunAsUserStrategyType.RUN_AS_ANY:
        return RunAsAny(options)
    raise StrategyConfigError(f"Unrecognized RunAsUser strategy type {_type_name(kind)}")