"""Driver interface shared by every provisioning backend."""

from __future__ import annotations

import abc
import time
from pathlib import Path
from typing import Any, Callable, TypeVar

from loguru import logger

from ..config import MachineConfig
from ..errors import CSMachineError
from ..flags import DriverOptions, Flag
from ..state import State

log = logger

T = TypeVar('T')

DOCKER_PORT = 2376


class BaseDriver(abc.ABC):
    """Lifecycle verbs a host calls on a driver.

    Identity and connection details live in :attr:`cfg`, which the host
    persists between invocations.
    """

    name = ''

    def __init__(
        self,
        machine_name: str = '',
        store_path: str = '',
        *,
        cfg: MachineConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if cfg is None:
            cfg = MachineConfig(
                name=machine_name, driver=self.name, store_path=store_path
            )
        self.cfg = cfg
        self._sleep = sleep

    @property
    def machine_name(self) -> str:
        return self.cfg.name

    @property
    def store_path(self) -> str:
        return self.cfg.store_path

    def driver_name(self) -> str:
        return self.name

    def resolve_store_path(self, file: str) -> str:
        return str(Path(self.store_path) / file)

    def get_ip(self) -> str:
        ip = self.cfg.resources.ip_address
        if not ip:
            raise CSMachineError('IP address is not set')
        return ip

    def get_ssh_hostname(self) -> str:
        return self.get_ip()

    def get_ssh_key_path(self) -> str:
        if not self.cfg.ssh.key_path:
            self.cfg.ssh.key_path = self.resolve_store_path('id_rsa')
        return self.cfg.ssh.key_path

    def get_ssh_port(self) -> int:
        return int(self.cfg.ssh.port)

    def get_ssh_username(self) -> str:
        return self.cfg.ssh.user

    def get_url(self) -> str:
        """Docker daemon URL, or an empty string when the machine is not running.

        Lookup failures (missing server, no stored IP) also give an empty
        string.
        """
        try:
            if self.get_state() is not State.RUNNING:
                return ''
            ip = self.get_ip()
        except CSMachineError as ex:
            log.debug('No URL for machine {}: {}', self.machine_name, ex)
            return ''
        host = f'[{ip}]' if ':' in ip else ip
        return f'tcp://{host}:{DOCKER_PORT}'

    def wait_for(
        self,
        fetch: Callable[[], T],
        done: Callable[[T], bool],
        *,
        what: str,
    ) -> T:
        """Call ``fetch`` every poll interval until ``done`` accepts its result.

        Waits forever unless ``cfg.poll.timeout_s`` is positive, in which case
        :class:`TimeoutError` is raised once it has elapsed.
        """
        interval = float(self.cfg.poll.interval_s)
        timeout = float(self.cfg.poll.timeout_s or 0)
        deadline = time.monotonic() + timeout if timeout > 0 else None
        while True:
            value = fetch()
            if done(value):
                return value
            if deadline is not None and time.monotonic() >= deadline:
                raise TimeoutError(
                    f'Timed out after {timeout:g}s waiting for {what}'
                )
            log.debug('Waiting for {}', what)
            self._sleep(interval)

    @abc.abstractmethod
    def get_create_flags(self) -> list[Flag]:
        pass

    @abc.abstractmethod
    def set_config_from_flags(self, opts: DriverOptions | dict[str, Any]) -> None:
        pass

    def pre_create_check(self) -> None:
        return None

    @abc.abstractmethod
    def create(self) -> None:
        pass

    @abc.abstractmethod
    def start(self) -> None:
        pass

    @abc.abstractmethod
    def stop(self) -> None:
        pass

    @abc.abstractmethod
    def kill(self) -> None:
        pass

    @abc.abstractmethod
    def remove(self) -> None:
        pass

    @abc.abstractmethod
    def get_state(self) -> State:
        pass

    def restart(self) -> None:
        self.stop()
        self.start()
