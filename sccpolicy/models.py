"""Data types for pods, namespaces and security context constraints."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

UID_RANGE_ANNOTATION = "openshift.io/sa.scc.uid-range"
MCS_ANNOTATION = "openshift.io/sa.scc.mcs"
SUPPLEMENTAL_GROUPS_ANNOTATION = "openshift.io/sa.scc.supplemental-groups"


class StrategyConfigError(ValueError):
    """A strategy could not be built from the options it was given."""


@dataclass
class SELinuxOptions:
    """SELinux labels applied to a pod or container."""

    user: str = ""
    role: str = ""
    type: str = ""
    level: str = ""


class SeccompProfileType(str, Enum):
    UNCONFINED = "Unconfined"
    RUNTIME_DEFAULT = "RuntimeDefault"
    LOCALHOST = "Localhost"


@dataclass
class SeccompProfile:
    type: SeccompProfileType | str
    localhost_profile: str | None = None


@dataclass
class Sysctl:
    name: str
    value: str = ""


@dataclass
class SecurityContext:
    """Security settings of a single container."""

    privileged: bool | None = None
    run_as_user: int | None = None
    run_as_non_root: bool | None = None
    selinux_options: SELinuxOptions | None = None
    seccomp_profile: SeccompProfile | None = None
    read_only_root_filesystem: bool | None = None
    allow_privilege_escalation: bool | None = None


@dataclass
class PodSecurityContext:
    """Security settings that apply to every container of a pod."""

    host_network: bool = False
    host_pid: bool = False
    host_ipc: bool = False
    run_as_user: int | None = None
    run_as_non_root: bool | None = None
    selinux_options: SELinuxOptions | None = None
    supplemental_groups: list[int] | None = None
    fs_group: int | None = None
    sysctls: list[Sysctl] = field(default_factory=list)
    seccomp_profile: SeccompProfile | None = None


@dataclass
class Container:
    name: str = ""
    security_context: SecurityContext | None = None


@dataclass
class PodSpec:
    containers: list[Container] = field(default_factory=list)
    init_containers: list[Container] = field(default_factory=list)
    ephemeral_containers: list[Container] = field(default_factory=list)
    security_context: PodSecurityContext | None = None


@dataclass
class Pod:
    name: str = ""
    namespace: str = ""
    annotations: dict[str, str] = field(default_factory=dict)
    spec: PodSpec = field(default_factory=PodSpec)


@dataclass
class IDRange:
    min: int = 0
    max: int = 0


class RunAsUserStrategyType(str, Enum):
    MUST_RUN_AS = "MustRunAs"
    MUST_RUN_AS_RANGE = "MustRunAsRange"
    MUST_RUN_AS_NON_ROOT = "MustRunAsNonRoot"
    RUN_AS_ANY = "RunAsAny"


class SELinuxStrategyType(str, Enum):
    MUST_RUN_AS = "MustRunAs"
    RUN_AS_ANY = "RunAsAny"


class GroupStrategyType(str, Enum):
    MUST_RUN_AS = "MustRunAs"
    RUN_AS_ANY = "RunAsAny"


@dataclass
class RunAsUserStrategyOptions:
    type: RunAsUserStrategyType | str | None = None
    uid: int | None = None
    uid_range_min: int | None = None
    uid_range_max: int | None = None


@dataclass
class SELinuxContextStrategyOptions:
    type: SELinuxStrategyType | str | None = None
    selinux_options: SELinuxOptions | None = None


@dataclass
class FSGroupStrategyOptions:
    type: GroupStrategyType | str | None = None
    ranges: list[IDRange] = field(default_factory=list)


@dataclass
class SupplementalGroupsStrategyOptions:
    type: GroupStrategyType | str | None = None
    ranges: list[IDRange] = field(default_factory=list)


@dataclass
class SecurityContextConstraints:
    """A named set of rules that pods must satisfy."""

    name: str = ""
    priority: int | None = None
    users: list[str] = field(default_factory=list)
    groups: list[str] = field(default_factory=list)
    run_as_user: RunAsUserStrategyOptions = field(default_factory=RunAsUserStrategyOptions)
    selinux_context: SELinuxContextStrategyOptions = field(
        default_factory=SELinuxContextStrategyOptions
    )
    fs_group: FSGroupStrategyOptions = field(default_factory=FSGroupStrategyOptions)
    supplemental_groups: SupplementalGroupsStrategyOptions = field(
        default_factory=SupplementalGroupsStrategyOptions
    )
    seccomp_profiles: list[str] = field(default_factory=list)
    allowed_unsafe_sysctls: list[str] = field(default_factory=list)
    forbidden_sysctls: list[str] = field(default_factory=list)
    allow_privileged_container: bool = False
    allow_host_network: bool = False
    allow_host_pid: bool = False
    allow_host_ipc: bool = False
    allow_host_ports: bool = False
    read_only_root_filesystem: bool = False
    allow_privilege_escalation: bool | None = None
    default_allow_privilege_escalation: bool | None = None


@dataclass
class Namespace:
    name: str = ""
    annotations: dict[str, str] = field(default_factory=dict)