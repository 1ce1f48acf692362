"""Strategies that decide the SELinux labels of pods and containers."""

from __future__ import annotations

import dataclasses
from abc import ABC, abstractmethod
from typing import Any

from .field import FieldError, Path, invalid, required
from .models import (
    Container,
    Pod,
    SELinuxContextStrategyOptions,
    SELinuxOptions,
    SELinuxStrategyType,
    StrategyConfigError,
)


def _child(path: Path | None, name: str) -> Path:
    return (path if path is not None else Path()).child(name)


class SELinuxStrategy(ABC):
    """Generates and validates SELinux options."""

    @abstractmethod
    def generate(self, pod: Pod | None, container: Container | None) -> SELinuxOptions | None:
        """Return the SELinux options to apply, or None to leave them unset."""

    @abstractmethod
    def validate(
        self,
        fld_path: Path | None,
        pod: Pod | None,
        container: Container | None,
        options: SELinuxOptions | None,
    ) -> list[FieldError]:
        """Return the errors found in the given options."""


class MustRunAs(SELinuxStrategy):
    """Requires the exact SELinux options configured on the constraint."""

    def __init__(self, options: SELinuxContextStrategyOptions | None) -> None:
        if options is None:
            raise StrategyConfigError("MustRunAs requires SELinuxContextStrategyOptions")
        if options.selinux_options is None:
            raise StrategyConfigError("MustRunAs requires SELinuxOptions")
        self._options = options

    def generate(self, pod, container):
        return dataclasses.replace(self._options.selinux_options)

    def validate(self, fld_path, pod, container, options):
        if options is None:
            return [required(fld_path, "")]
        want = self._options.selinux_options
        errors: list[FieldError] = []
        if not equal_levels(want.level, options.level):
            errors.append(invalid(_child(fld_path, "level"), options.level, f"must be {want.level}"))
        if options.role != want.role:
            errors.append(invalid(_child(fld_path, "role"), options.role, f"must be {want.role}"))
        if options.type != want.type:
            errors.append(invalid(_child(fld_path, "type"), options.type, f"must be {want.type}"))
        if options.user != want.user:
            errors.append(invalid(_child(fld_path, "user"), options.user, f"must be {want.user}"))
        return errors


class RunAsAny(SELinuxStrategy):
    """Places no restriction on SELinux options."""

    def __init__(self, options: SELinuxContextStrategyOptions | None = None) -> None:
        self._options = options

    def generate(self, pod, container):
        return None

    def validate(self, fld_path, pod, container, options):
        return []


def equal_levels(expected: str, actual: str) -> bool:
    """Compare SELinux levels, ignoring the order of categories."""
    if expected == actual:
        return True
    expected_parts = expected.split(":", 1)
    actual_parts = actual.split(":", 1)
    if len(expected_parts) != 2 or len(actual_parts) != 2:
        return False
    if expected_parts[0] != actual_parts[0]:
        return False
    return sorted(expected_parts[1].split(",")) == sorted(actual_parts[1].split(","))


def _type_name(value: Any) -> str:
    return str(getattr(value, "value", value))


def create_selinux_strategy(options: SELinuxContextStrategyOptions) -> SELinuxStrategy:
    """Build the strategy named by ``options.type``."""
    kind = options.type
    if kind == SELinuxStrategyType.MUST_RUN_AS:
        return MustRunAs(options)
    if kind == SELinuxStrategyType.RUN_AS_ANY:
        return RunAsAny(options)
    raise StrategyConfigError(f"Unrecognized SELinuxContext strategy type {_type_name(kind)}")