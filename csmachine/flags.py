"""Create-time flag schema and option resolution.

Every driver option has a flag name, an environment variable and a default.
:class:`DriverOptions` resolves a value from explicitly provided input first,
then the environment, then the flag default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from .config import (
    DEFAULT_CPU,
    DEFAULT_DRIVE_NAME,
    DEFAULT_DRIVE_SIZE,
    DEFAULT_MEMORY,
    DEFAULT_SSH_PORT,
    DEFAULT_SSH_USER,
)
from .errors import ConfigError


@dataclass(frozen=True)
class Flag:
    name: str
    envvar: str
    usage: str
    default: Any = None
    kind: str = 'string'

    @property
    def attr(self) -> str:
        """Python identifier form, e.g. ``cloudsigma_cpu_type``."""
        return self.name.replace('-', '_')


def _string(name: str, envvar: str, usage: str, default: str = '') -> Flag:
    return Flag(name, envvar, usage, default, 'string')


def _int(name: str, envvar: str, usage: str, default: int = 0) -> Flag:
    return Flag(name, envvar, usage, default, 'int')


def _float(name: str, envvar: str, usage: str, default: float = 0.0) -> Flag:
    return Flag(name, envvar, usage, default, 'float')


CLOUDSIGMA_FLAGS: tuple[Flag, ...] = (
    _string(
        'cloudsigma-api-location',
        'CLOUDSIGMA_API_LOCATION',
        'CloudSigma API location endpoint code',
    ),
    _int(
        'cloudsigma-cpu',
        'CLOUDSIGMA_CPU',
        'CPU clock speed for the host in MHz',
        DEFAULT_CPU,
    ),
    _string('cloudsigma-cpu-type', 'CLOUDSIGMA_CPU_TYPE', 'CPU type'),
    _string(
        'cloudsigma-cpu-epc-size',
        'CLOUDSIGMA_CPU_EPC_SIZE',
        'Enclave Page Cache (EPC) size in bytes',
    ),
    _string(
        'cloudsigma-drive-name',
        'CLOUDSIGMA_DRIVE_NAME',
        'CloudSigma library drive name',
        DEFAULT_DRIVE_NAME,
    ),
    _int(
        'cloudsigma-drive-size',
        'CLOUDSIGMA_DRIVE_SIZE',
        'Drive size for the host in GiB',
        DEFAULT_DRIVE_SIZE,
    ),
    _string(
        'cloudsigma-drive-uuid',
        'CLOUDSIGMA_DRIVE_UUID',
        'CloudSigma library drive uuid',
    ),
    _int(
        'cloudsigma-memory',
        'CLOUDSIGMA_MEMORY',
        'Size of memory for the host in MB',
        DEFAULT_MEMORY,
    ),
    _string('cloudsigma-password', 'CLOUDSIGMA_PASSWORD', 'CloudSigma password'),
    _int(
        'cloudsigma-ssh-port',
        'CLOUDSIGMA_SSH_PORT',
        'SSH port to connect',
        DEFAULT_SSH_PORT,
    ),
    _string(
        'cloudsigma-ssh-user',
        'CLOUDSIGMA_SSH_USER',
        'SSH username to connect',
        DEFAULT_SSH_USER,
    ),
    _string(
        'cloudsigma-static-ip',
        'CLOUDSIGMA_STATIC_IP',
        "CloudSigma network adapter's static IP address",
    ),
    _string('cloudsigma-username', 'CLOUDSIGMA_USERNAME', 'CloudSigma user email'),
    _float(
        'cloudsigma-poll-interval',
        'CLOUDSIGMA_POLL_INTERVAL',
        'Seconds between status checks while waiting on the API',
        1.0,
    ),
    _int(
        'cloudsigma-poll-timeout',
        'CLOUDSIGMA_POLL_TIMEOUT',
        'Give up waiting on the API after this many seconds (0 waits forever)',
        0,
    ),
)


class DriverOptions:
    """Resolve flag values from explicit input, environment and defaults.

    Example:
        >>> opts = DriverOptions({'cloudsigma-cpu': 1500}, CLOUDSIGMA_FLAGS, environ={})
        >>> opts.int('cloudsigma-cpu')
        1500
        >>> opts.string('cloudsigma-ssh-user')
        'cloudsigma'
    """

    def __init__(
        self,
        values: Mapping[str, Any] | None,
        flags: Sequence[Flag],
        *,
        environ: Mapping[str, str] | None = None,
    ):
        self.values = {
            k.replace('_', '-'): v
            for k, v in (values or {}).items()
            if v is not None
        }
        self.flags = {f.name: f for f in flags}
        self.environ = os.environ if environ is None else environ

    def _flag(self, name: str) -> Flag:
        try:
            return self.flags[name]
        except KeyError:
            raise ConfigError(f'unknown flag --{name}') from None

    def is_set(self, name: str) -> bool:
        """True if ``name`` was given explicitly or through its env var."""
        flag = self._flag(name)
        return name in self.values or bool(self.environ.get(flag.envvar))

    def raw(self, name: str) -> Any:
        flag = self._flag(name)
        if name in self.values:
            return self.values[name]
        env = self.environ.get(flag.envvar)
        if env:
            return env
        return flag.default

    def string(self, name: str) -> str:
        value = self.raw(name)
        return '' if value is None else str(value)

    def int(self, name: str) -> int:
        value = self.raw(name)
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ConfigError(
                f'--{name} expects an integer, got {value!r}'
            ) from None

    def float(self, name: str) -> float:
        value = self.raw(name)
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ConfigError(
                f'--{name} expects a number, got {value!r}'
            ) from None
