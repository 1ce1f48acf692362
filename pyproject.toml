[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sccpolicy"
version = "0.1.0"
description = "Security context constraint strategies: generate and validate pod and container security settings."
requires-python = ">=3.10"
dependencies = []
keywords = ["security", "pod", "container", "seccomp", "selinux", "sysctl", "policy"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
    "Topic :: Security",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["sccpolicy"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
