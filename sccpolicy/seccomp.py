"""Strategy that constrains the seccomp profiles of pods and containers."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from .field import FieldError, Path, forbidden
from .models import Container, Pod, SeccompProfile, SeccompProfileType

ALLOW_ANY_PROFILE = "*"

POD_ANNOTATION_KEY = "seccomp.security.alpha.kubernetes.io/pod"
CONTAINER_ANNOTATION_KEY_PREFIX = "container.seccomp.security.alpha.kubernetes.io/"

PROFILE_UNCONFINED = "unconfined"
PROFILE_RUNTIME_DEFAULT = "runtime/default"
PROFILE_DOCKER_DEFAULT = "docker/default"
LOCALHOST_PROFILE_PREFIX = "localhost/"

_RUNTIME_DEFAULT_NAMES = frozenset({PROFILE_DOCKER_DEFAULT, PROFILE_RUNTIME_DEFAULT})


class SeccompStrategy:
    """Generates and validates seccomp profiles against a list of allowed ones.

    The wildcard ``*`` allows any profile. Because the deprecated
    ``docker/default`` and ``runtime/default`` name the same profile, allowing
    either one allows both.
    """

    def __init__(self, allowed_profiles: Iterable[str] | None = None) -> None:
        allowed: list[str] = []
        allow_any = False
        runtime_default_allowed = False
        for profile in allowed_profiles or ():
            if profile == ALLOW_ANY_PROFILE:
                allow_any = True
                continue
            if profile in _RUNTIME_DEFAULT_NAMES:
                runtime_default_allowed = True
            allowed.append(profile)
        self._allowed_profiles = tuple(allowed)
        self._allow_any_profile = allow_any
        self._runtime_default_allowed = runtime_default_allowed

    @property
    def allowed_profiles(self) -> list[str]:
        """The allowed profiles other than the wildcard, in their given order."""
        return list(self._allowed_profiles)

    @property
    def allow_any_profile(self) -> bool:
        """Whether the wildcard was among the allowed profiles."""
        return self._allow_any_profile

    def generate(self, annotations: Mapping[str, str] | None, pod: Pod) -> str:
        """Return the pod's profile, keeping one already set, else the first allowed one."""
        existing = (annotations or {}).get(POD_ANNOTATION_KEY, "")
        if existing:
            return existing
        psc = pod.spec.security_context
        if psc is not None and psc.seccomp_profile is not None:
            return annotation_for_field(psc.seccomp_profile)
        if self._allowed_profiles:
            return self._allowed_profiles[0]
        return ""

    def validate_pod(self, pod: Pod) -> list[FieldError]:
        """Check the pod-level profile, from its annotation or else its field."""
        path = Path("pod", "metadata", "annotations").key(POD_ANNOTATION_KEY)
        profile = (pod.annotations or {}).get(POD_ANNOTATION_KEY, "")
        psc = pod.spec.security_context
        if not profile and psc is not None and psc.seccomp_profile is not None:
            profile = annotation_for_field(psc.seccomp_profile)
        error = self._validate_profile(path, profile)
        return [error] if error is not None else []

    def validate_container(self, pod: Pod, container: Container) -> list[FieldError]:
        """Check the profile that applies to one container of the pod."""
        path = Path("pod", "metadata", "annotations").key(
            CONTAINER_ANNOTATION_KEY_PREFIX + container.name
        )
        error = self._validate_profile(path, profile_for_container(pod, container))
        return [error] if error is not None else []

    def _validate_profile(self, path: Path, profile: str) -> FieldError | None:
        if not self._allow_any_profile and not self._allowed_profiles and profile:
            return forbidden(path, "seccomp may not be set")
        if not self._allowed_profiles and not profile:
            return None
        if self._allow_any_profile:
            return None
        if profile in self._allowed_profiles:
            return None
        if self._runtime_default_allowed and profile in _RUNTIME_DEFAULT_NAMES:
            return None
        valid = "[" + " ".join(self._allowed_profiles) + "]"
        return forbidden(
            path, f"{profile} is not an allowed seccomp profile. Valid values are {valid}"
        )


def profile_for_container(pod: Pod, container: Container) -> str:
    """Return the container's profile if set, otherwise the pod's profile."""
    csc = container.security_context
    if csc is not None and csc.seccomp_profile is not None:
        return annotation_for_field(csc.seccomp_profile)
    annotations = pod.annotations or {}
    key = CONTAINER_ANNOTATION_KEY_PREFIX + container.name
    if key in annotations:
        return annotations[key]
    psc = pod.spec.security_context
    if psc is not None and psc.seccomp_profile is not None:
        return annotation_for_field(psc.seccomp_profile)
    return annotations.get(POD_ANNOTATION_KEY, "")


def annotation_for_field(profile: SeccompProfile) -> str:
    """Convert a seccomp profile field into its annotation value ("" if unknown)."""
    if profile.type == SeccompProfileType.UNCONFINED:
        return PROFILE_UNCONFINED
    if profile.type == SeccompProfileType.RUNTIME_DEFAULT:
        return PROFILE_RUNTIME_DEFAULT
    if profile.type == SeccompProfileType.LOCALHOST and profile.localhost_profile is not None:
        return LOCALHOST_PROFILE_PREFIX + profile.localhost_profile
    return ""