"""Project-specific exception types."""

from __future__ import annotations


class CSMachineError(RuntimeError):
    """Base error for domain-level csmachine failures."""


class ConfigError(CSMachineError):
    """Raised when driver options are missing or inconsistent."""


class MissingSSHKeyError(CSMachineError):
    """Raised when the machine SSH key is required but missing."""


class MachineNotFoundError(CSMachineError):
    """Raised when no stored machine matches the requested name."""


class UnknownDriverError(CSMachineError):
    """Raised when a driver name has no registered factory."""
