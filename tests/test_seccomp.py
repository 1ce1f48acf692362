import pytest

from sccpolicy.models import (
    Container,
    Pod,
    PodSecurityContext,
    PodSpec,
    SeccompProfile,
    SeccompProfileType,
    SecurityContext,
)
from sccpolicy.seccomp import (
    CONTAINER_ANNOTATION_KEY_PREFIX,
    POD_ANNOTATION_KEY,
    SeccompStrategy,
    annotation_for_field,
    profile_for_container,
)


def localhost(name):
    return SeccompProfile(SeccompProfileType.LOCALHOST, name)


RUNTIME_DEFAULT = SeccompProfile(SeccompProfileType.RUNTIME_DEFAULT)
UNCONFINED = SeccompProfile(SeccompProfileType.UNCONFINED)


@pytest.mark.parametrize(
    "profiles, allow_any, allowed",
    [
        (None, False, []),
        (["*"], True, []),
        (["*", "foo"], True, ["foo"]),
        (["foo", "*", "bar"], True, ["foo", "bar"]),
        (["bar", "foo"], False, ["bar", "foo"]),
    ],
)
def test_new_strategy(profiles, allow_any, allowed):
    strategy = SeccompStrategy(profiles)
    assert strategy.allow_any_profile is allow_any
    assert strategy.allowed_profiles == allowed


@pytest.mark.parametrize(
    "annotations, pod_profile, allowed, expected",
    [
        (None, None, [], ""),
        (None, None, None, ""),
        (None, None, ["*"], ""),
        (None, None, ["foo", "bar"], "foo"),
        (None, None, ["*", "foo", "bar"], "foo"),
        (None, RUNTIME_DEFAULT, ["foo", "bar"], "runtime/default"),
        ({POD_ANNOTATION_KEY: "baz"}, None, ["foo", "bar"], "baz"),
        ({POD_ANNOTATION_KEY: "baz"}, RUNTIME_DEFAULT, ["foo", "bar"], "baz"),
    ],
)
def test_generate(annotations, pod_profile, allowed, expected):
    strategy = SeccompStrategy(allowed)
    pod = Pod(spec=PodSpec(security_context=PodSecurityContext(seccomp_profile=pod_profile)))
    assert strategy.generate(annotations, pod) == expected


def new_pod(annotation_profile, field_profile):
    pod = Pod()
    if annotation_profile:
        pod.annotations = {POD_ANNOTATION_KEY: annotation_profile}
    if field_profile is not None:
        pod.spec.security_context = PodSecurityContext(seccomp_profile=field_profile)
    return pod


@pytest.mark.parametrize(
    "allowed, pod, expected_msg",
    [
        (None, new_pod("", None), ""),
        (None, new_pod("foo", None), "seccomp may not be set"),
        (["foo"], new_pod("foo", None), ""),
        (
            ["foo"],
            new_pod("bar", None),
            "Forbidden: bar is not an allowed seccomp profile. Valid values are [foo]",
        ),
        (["*"], new_pod("foo", None), ""),
        (["*"], new_pod("", None), ""),
        (["localhost/foo"], new_pod("localhost/foo", localhost("foo")), ""),
        (
            ["foo"],
            new_pod("", localhost("foo")),
            "Forbidden: localhost/foo is not an allowed seccomp profile. Valid values are [foo]",
        ),
        (["localhost/foo"], new_pod("", localhost("foo")), ""),
        (["docker/default"], new_pod("runtime/default", None), ""),
        (["docker/default"], new_pod("", RUNTIME_DEFAULT), ""),
        (["runtime/default"], new_pod("docker/default", None), ""),
        (
            ["runtime/default"],
            new_pod("", UNCONFINED),
            "unconfined is not an allowed seccomp profile. Valid values are [runtime/default]",
        ),
    ],
)
def test_validate_pod(allowed, pod, expected_msg):
    errors = SeccompStrategy(allowed).validate_pod(pod)
    if not expected_msg:
        assert errors == []
    else:
        assert len(errors) == 1
        assert expected_msg in str(errors[0])


def test_validate_pod_error_field_path():
    errors = SeccompStrategy(["foo"]).validate_pod(new_pod("bar", None))
    assert errors[0].field == f"pod.metadata.annotations[{POD_ANNOTATION_KEY}]"


def new_container_pod(annotation_profile, field_profile):
    pod = Pod(spec=PodSpec(containers=[Container(name="test")]))
    if annotation_profile:
        pod.annotations = {CONTAINER_ANNOTATION_KEY_PREFIX + "test": annotation_profile}
    if field_profile is not None:
        pod.spec.containers[0].security_context = SecurityContext(seccomp_profile=field_profile)
    return pod


@pytest.mark.parametrize(
    "allowed, pod, expected_msg",
    [
        (None, new_container_pod("", None), ""),
        (None, new_container_pod("foo", None), "seccomp may not be set"),
        (["foo"], new_container_pod("foo", None), ""),
        (
            ["foo"],
            new_container_pod("bar", None),
            "Forbidden: bar is not an allowed seccomp profile. Valid values are [foo]",
        ),
        (["*"], new_container_pod("foo", None), ""),
        (["*"], new_container_pod("", None), ""),
        (["localhost/foo"], new_container_pod("", localhost("foo")), ""),
        (
            ["localhost/foo"],
            new_container_pod("", localhost("bar")),
            "Forbidden: localhost/bar is not an allowed seccomp profile. "
            "Valid values are [localhost/foo]",
        ),
        (["runtime/default"], new_container_pod("", RUNTIME_DEFAULT), ""),
        (
            ["runtime/default"],
            new_container_pod("", UNCONFINED),
            "unconfined is not an allowed seccomp profile. Valid values are [runtime/default]",
        ),
    ],
)
def test_validate_container(allowed, pod, expected_msg):
    errors = SeccompStrategy(allowed).validate_container(pod, pod.spec.containers[0])
    if not expected_msg:
        assert errors == []
    else:
        assert len(errors) == 1
        assert expected_msg in str(errors[0])


def test_multiple_allowed_profiles_listed_with_spaces():
    errors = SeccompStrategy(["foo", "bar"]).validate_pod(new_pod("baz", None))
    assert "Valid values are [foo bar]" in str(errors[0])


@pytest.mark.parametrize(
    "profile, expected",
    [
        (UNCONFINED, "unconfined"),
        (RUNTIME_DEFAULT, "runtime/default"),
        (localhost("prof"), "localhost/prof"),
        (SeccompProfile(SeccompProfileType.LOCALHOST), ""),
        (SeccompProfile("Bogus"), ""),
    ],
)
def test_annotation_for_field(profile, expected):
    assert annotation_for_field(profile) == expected


def test_profile_for_container_prefers_container_field():
    pod = new_container_pod("annotated", localhost("field"))
    pod.spec.security_context = PodSecurityContext(seccomp_profile=UNCONFINED)
    assert profile_for_container(pod, pod.spec.containers[0]) == "localhost/field"


def test_profile_for_container_uses_container_annotation():
    pod = new_container_pod("annotated", None)
    pod.spec.security_context = PodSecurityContext(seccomp_profile=UNCONFINED)
    assert profile_for_container(pod, pod.spec.containers[0]) == "annotated"


def test_profile_for_container_falls_back_to_pod_field_then_annotation():
    pod = new_container_pod("", None)
    pod.spec.security_context = PodSecurityContext(seccomp_profile=UNCONFINED)
    assert profile_for_container(pod, pod.spec.containers[0]) == "unconfined"

    pod = new_container_pod("", None)
    pod.annotations = {POD_ANNOTATION_KEY: "podlevel"}
    assert profile_for_container(pod, pod.spec.containers[0]) == "podlevel"