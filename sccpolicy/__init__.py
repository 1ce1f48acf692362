"""Security context constraint strategies for pods and containers."""

__version__ = "0.1.0"
__all__ = ["field", "models", "user", "selinux", "seccomp", "sysctl", "matching"]