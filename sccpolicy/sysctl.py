"""Strategy that restricts which sysctls a pod may set."""

from __future__ import annotations

from collections.abc import Iterable

from .field import FieldError, Path, forbidden
from .models import Pod


def safe_sysctl_allowlist() -> list[str]:
    """Return the sysctls that are namespaced and isolated, hence safe to set."""
    return [
        "kernel.shm_rmid_forced",
        "net.ipv4.ip_local_port_range",
        "net.ipv4.tcp_syncookies",
        "net.ipv4.ping_group_range",
        "net.ipv4.ip_unprivileged_port_start",
    ]


def _matches_pattern(name: str, patterns: Iterable[str]) -> bool:
    for pattern in patterns:
        if pattern.endswith("*"):
            if name.startswith(pattern[:-1]):
                return True
        elif name == pattern:
            return True
    return False


class MustMatchPatterns:
    """Allows safe sysctls and explicitly allowed unsafe ones, unless forbidden.

    Patterns ending in ``*`` match by prefix.
    """

    def __init__(
        self,
        safe_allowlist: Iterable[str] | None = None,
        allowed_unsafe_sysctls: Iterable[str] | None = None,
        forbidden_sysctls: Iterable[str] | None = None,
    ) -> None:
        self._safe_allowlist = tuple(safe_allowlist or ())
        self._allowed_unsafe = tuple(allowed_unsafe_sysctls or ())
        self._forbidden = tuple(forbidden_sysctls or ())

    def is_forbidden(self, name: str) -> bool:
        return _matches_pattern(name, self._forbidden)

    def is_safe(self, name: str) -> bool:
        return name in self._safe_allowlist

    def is_allowed_unsafe(self, name: str) -> bool:
        return _matches_pattern(name, self._allowed_unsafe)

    def validate(self, pod: Pod) -> list[FieldError]:
        """Return an error for every sysctl of the pod that is not allowed."""
        psc = pod.spec.security_context
        sysctls = psc.sysctls if psc is not None and psc.sysctls else []
        base = Path("pod", "spec", "securityContext").child("sysctls")
        errors: list[FieldError] = []
        for i, sysctl in enumerate(sysctls):
            if self.is_forbidden(sysctl.name):
                errors.append(forbidden(base.index(i), f'sysctl "{sysctl.name}" is not allowed'))
            elif self.is_safe(sysctl.name) or self.is_allowed_unsafe(sysctl.name):
                continue
            else:
                errors.append(
                    forbidden(base.index(i), f'unsafe sysctl "{sysctl.name}" is not allowed')
                )
        return errors