"""Matching users to constraints and filling constraints from namespace annotations."""

from __future__ import annotations

import copy
import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from .models import (
    MCS_ANNOTATION,
    SUPPLEMENTAL_GROUPS_ANNOTATION,
    UID_RANGE_ANNOTATION,
    GroupStrategyType,
    IDRange,
    Namespace,
    RunAsUserStrategyType,
    SecurityContextConstraints,
    SELinuxOptions,
    SELinuxStrategyType,
)

log = logging.getLogger(__name__)

SECURITY_API_GROUP = "security.openshift.io"
SCC_RESOURCE = "securitycontextconstraints"

_MAX_ID = 2**32 - 1
_SIZE_BLOCK = re.compile(r"^(\d+)/(\d+)$")
_RANGE_BLOCK = re.compile(r"^(\d+)-(\d+)$")


@dataclass(frozen=True)
class UserInfo:
    """The identity of a user making a request."""

    name: str = ""
    groups: tuple[str, ...] = ()


@dataclass(frozen=True)
class AuthorizationAttributes:
    """What is asked of an authorizer: may ``user`` perform ``verb`` on the resource."""

    user: UserInfo
    name: str
    namespace: str = ""
    verb: str = "use"
    api_group: str = SECURITY_API_GROUP
    resource: str = SCC_RESOURCE
    resource_request: bool = True


Authorizer = Callable[[AuthorizationAttributes], bool]


@dataclass(frozen=True)
class Block:
    """An inclusive range of ids, ``start`` to ``end``."""

    start: int
    end: int

    @property
    def size(self) -> int:
        return self.end - self.start + 1

    def __str__(self) -> str:
        return f"{self.start}/{self.size}"


def parse_block(text: str) -> Block:
    """Parse ``start/size`` or ``start-end`` into a block.

    Raises ValueError if the text is in neither form or describes no ids.
    """
    match = _SIZE_BLOCK.match(text)
    if match:
        start, size = int(match.group(1)), int(match.group(2))
        if size == 0:
            raise ValueError(f"block {text!r} has a size of zero")
        end = start + size - 1
    else:
        match = _RANGE_BLOCK.match(text)
        if not match:
            raise ValueError(f"block {text!r} is not in the form start/size or start-end")
        start, end = int(match.group(1)), int(match.group(2))
        if end < start:
            raise ValueError(f"block {text!r} ends before it starts")
    if end > _MAX_ID:
        raise ValueError(f"block {text!r} is out of range")
    return Block(start, end)


def _authorized_for_scc(
    scc_name: str,
    user_info: UserInfo,
    namespace: str,
    authorizer: Authorizer,
) -> bool:
    attributes = AuthorizationAttributes(user=user_info, name=scc_name, namespace=namespace)
    try:
        return bool(authorizer(attributes))
    except Exception as exc:  # an authorizer failure denies access
        log.debug("cannot authorize for SCC %s: %s", scc_name, exc)
        return False


def constraint_applies_to(
    scc_name: str,
    scc_users: Iterable[str],
    scc_groups: Iterable[str],
    user_info: UserInfo,
    namespace: str,
    authorizer: Authorizer | None,
) -> bool:
    """Return whether the user may use the constraint.

    The user qualifies if named in ``scc_users``, if one of its groups is in
    ``scc_groups``, or else if the authorizer allows the "use" verb on the
    constraint in ``namespace``.
    """
    if user_info.name in set(scc_users):
        return True
    groups = set(scc_groups)
    if any(group in groups for group in user_info.groups):
        return True
    if authorizer is not None:
        return _authorized_for_scc(scc_name, user_info, namespace, authorizer)
    return False


def parse_supplemental_group_annotation(groups: str) -> list[Block]:
    """Parse a comma separated list of blocks."""
    blocks = [parse_block(segment) for segment in groups.split(",")]
    if not blocks:
        raise ValueError(f"no blocks parsed from annotation {groups}")
    return blocks


def get_preallocated_uid_range(namespace: Namespace) -> tuple[int, int]:
    """Return the (min, max) uids allocated to the namespace."""
    annotations = namespace.annotations or {}
    if UID_RANGE_ANNOTATION not in annotations:
        raise ValueError(f"unable to find annotation {UID_RANGE_ANNOTATION}")
    value = annotations[UID_RANGE_ANNOTATION]
    if not value:
        raise ValueError(f"found annotation {UID_RANGE_ANNOTATION} but it was empty")
    block = parse_block(value)
    log.debug(
        "got preallocated values for min: %d, max: %d for uid range in namespace %s",
        block.start,
        block.end,
        namespace.name,
    )
    return block.start, block.end


def get_preallocated_level(namespace: Namespace) -> str:
    """Return the SELinux level allocated to the namespace."""
    annotations = namespace.annotations or {}
    if MCS_ANNOTATION not in annotations:
        raise ValueError(f"unable to find annotation {MCS_ANNOTATION}")
    level = annotations[MCS_ANNOTATION]
    if not level:
        raise ValueError(f"found annotation {MCS_ANNOTATION} but it was empty")
    log.debug(
        "got preallocated value for level: %s for selinux options in namespace %s",
        level,
        namespace.name,
    )
    return level


def _supplemental_groups_annotation(namespace: Namespace) -> str:
    annotations = namespace.annotations or {}
    if SUPPLEMENTAL_GROUPS_ANNOTATION in annotations:
        groups = annotations[SUPPLEMENTAL_GROUPS_ANNOTATION]
    else:
        log.debug(
            "unable to find supplemental group annotation %s falling back to %s",
            SUPPLEMENTAL_GROUPS_ANNOTATION,
            UID_RANGE_ANNOTATION,
        )
        if UID_RANGE_ANNOTATION not in annotations:
            raise ValueError(
                "unable to find supplemental group or uid annotation for namespace "
                f"{namespace.name}"
            )
        groups = annotations[UID_RANGE_ANNOTATION]
    if not groups:
        raise ValueError(
            f"unable to find groups using {SUPPLEMENTAL_GROUPS_ANNOTATION} and "
            f"{UID_RANGE_ANNOTATION} annotations"
        )
    return groups


def get_preallocated_fs_group(namespace: Namespace) -> list[IDRange]:
    """Return the single fs group allocated to the namespace: the first id of its first block."""
    groups = _supplemental_groups_annotation(namespace)
    log.debug("got preallocated value for groups: %s in namespace %s", groups, namespace.name)
    first = parse_supplemental_group_annotation(groups)[0]
    return [IDRange(min=first.start, max=first.start)]


def get_preallocated_supplemental_groups(namespace: Namespace) -> list[IDRange]:
    """Return every group range allocated to the namespace."""
    groups = _supplemental_groups_annotation(namespace)
    log.debug("got preallocated value for groups: %s in namespace %s", groups, namespace.name)
    return [
        IDRange(min=block.start, max=block.end)
        for block in parse_supplemental_group_annotation(groups)
    ]


def requires_pre_allocated_uid_range(constraint: SecurityContextConstraints) -> bool:
    """True if the uid strategy is a range and neither bound is set."""
    options = constraint.run_as_user
    if options.type != RunAsUserStrategyType.MUST_RUN_AS_RANGE:
        return False
    return options.uid_range_min is None and options.uid_range_max is None


def requires_pre_allocated_selinux_level(constraint: SecurityContextConstraints) -> bool:
    """True if the SELinux strategy is MustRunAs and no level is set."""
    options = constraint.selinux_context
    if options.type != SELinuxStrategyType.MUST_RUN_AS:
        return False
    if options.selinux_options is None:
        return True
    return options.selinux_options.level == ""


def requires_preallocated_supplemental_groups(constraint: SecurityContextConstraints) -> bool:
    """True if the supplemental group strategy is MustRunAs with no ranges."""
    options = constraint.supplemental_groups
    if options.type != GroupStrategyType.MUST_RUN_AS:
        return False
    return not options.ranges


def requires_preallocated_fs_group(constraint: SecurityContextConstraints) -> bool:
    """True if the fs group strategy is MustRunAs with no ranges."""
    options = constraint.fs_group
    if options.type != GroupStrategyType.MUST_RUN_AS:
        return False
    return not options.ranges


def resolve_preallocated_values(
    namespace: Namespace, constraint: SecurityContextConstraints
) -> SecurityContextConstraints:
    """Return a copy of the constraint with missing values taken from the namespace.

    The given constraint is left untouched. Raises ValueError if a value the
    constraint needs is not allocated to the namespace.
    """
    resolved = copy.deepcopy(constraint)

    def failure(kind: str, exc: Exception) -> ValueError:
        return ValueError(
            f"unable to find pre-allocated {kind} annotation for namespace {namespace.name} "
            f"while trying to configure SCC {resolved.name}: {exc}"
        )

    if requires_pre_allocated_uid_range(resolved):
        try:
            low, high = get_preallocated_uid_range(namespace)
        except ValueError as exc:
            raise failure("uid", exc) from exc
        resolved.run_as_user.uid_range_min = low
        resolved.run_as_user.uid_range_max = high

    if requires_pre_allocated_selinux_level(resolved):
        try:
            level = get_preallocated_level(namespace)
        except ValueError as exc:
            raise failure("mcs", exc) from exc
        if resolved.selinux_context.selinux_options is None:
            resolved.selinux_context.selinux_options = SELinuxOptions()
        resolved.selinux_context.selinux_options.level = level

    if requires_preallocated_fs_group(resolved):
        try:
            resolved.fs_group.ranges = get_preallocated_fs_group(namespace)
        except ValueError as exc:
            raise failure("group", exc) from exc

    if requires_preallocated_supplemental_groups(resolved):
        try:
            resolved.supplemental_groups.ranges = get_preallocated_supplemental_groups(namespace)
        except ValueError as exc:
            raise failure("group", exc) from exc

    return resolved