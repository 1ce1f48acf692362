# sccpolicy

Strategies for security context constraints (SCCs). They fill in defaults for
pod and container security settings and check those settings against what a
constraint allows.

## What it covers

- `sccpolicy.user`: run-as-user strategies (`MustRunAs`, `MustRunAsRange`,
  `RunAsNonRoot`, `RunAsAny`), all subclasses of `RunAsUserStrategy`, and
  `create_user_strategy`, which picks one from `RunAsUserStrategyOptions.type`.
- `sccpolicy.selinux`: SELinux strategies (`MustRunAs`, `RunAsAny`),
  `equal_levels` and `create_selinux_strategy`. `equal_levels` ignores the
  order of categories in a level, so `s0:c6,c0` equals `s0:c0,c6`.
- `sccpolicy.seccomp`: `SeccompStrategy`, which picks a default profile,
  validates pod and container profiles, and treats `docker/default` and
  `runtime/default` as the same profile. `profile_for_container` and
  `annotation_for_field` turn profile fields into annotation values.
- `sccpolicy.sysctl`: `MustMatchPatterns`, which checks a pod's sysctls
  against a safe allowlist, allowed unsafe patterns and forbidden patterns
  (patterns ending in `*` match by prefix). The default safe list comes from
  `safe_sysctl_allowlist()`.
- `sccpolicy.matching`: `constraint_applies_to` decides whether a user may use
  a constraint, by name, by group, or through an authorizer callable that
  receives `AuthorizationAttributes`. `parse_block` reads UID blocks such as
  `1/5` or `1-5`. The `get_preallocated_*` and `requires_*` functions read UID
  ranges, SELinux levels and group ranges from namespace annotations, and
  `resolve_preallocated_values` returns a copy of a constraint with the
  missing values filled in.
- `sccpolicy.field`: `Path`, `FieldError` and the `required`, `invalid` and
  `forbidden` helpers that every strategy uses for its errors.
- `sccpolicy.models`: dataclasses for pods, containers, security contexts,
  constraints and namespaces, the strategy type enums, and
  `StrategyConfigError`.

## Example

```python
from sccpolicy.models import RunAsUserStrategyOptions
from sccpolicy.user import MustRunAsRange

strategy = MustRunAsRange(RunAsUserStrategyOptions(uid_range_min=1, uid_range_max=10))
assert strategy.generate(None, None) == 1

errors = strategy.validate(None, None, None, None, 11)
print(errors[0])  # runAsUser: Invalid value: 11: must be in the ranges: [1, 10]
```

A validation never raises for a setting that breaks a rule. It returns a list
of `FieldError` values, and the list is empty when everything passes. A
strategy whose configuration is incomplete raises `StrategyConfigError` when
it is built. The annotation readers in `sccpolicy.matching` raise
`ValueError` when a namespace lacks a value they need.

## What it does not do

- There is no single object that applies a whole constraint to a pod: each
  strategy is used on its own, and nothing here assigns security contexts to
  every container of a pod in one call.
- There are no strategies for fs groups, supplemental groups, capabilities or
  volume types, and nothing checks the host network, PID, IPC, port,
  privileged or read-only root filesystem settings held in the models.
- It does not list constraints, look up namespaces or talk to a cluster; the
  caller supplies constraints, namespaces and the authorizer.
- There is no command-line tool.

## Tests

```
pip install -e .[test]
pytest
```