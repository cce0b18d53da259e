"""CLI commands for the machine lifecycle: create, start/stop, rm, and queries."""

from __future__ import annotations

import shlex

import requests
import scriptconfig as scfg

from ..config import dump_toml
from ..errors import CSMachineError
from ..plugin import driver_names, get_driver
from ..ssh import require_ssh_key, ssh_base_args
from ..store import list_machines, machine_dir, machine_exists, remove_machine
from ..util import ensure_dir, run_cmd
from ._common import (
    _BaseCommand,
    _confirm,
    _load_driver,
    _MachineCommand,
    _save_driver,
    _usage,
    log,
)


class CreateCLI(_MachineCommand):
    """Create a machine: SSH key, cloned drive, server, then start it."""

    driver = scfg.Value('cloudsigma', help='Driver used to provision the machine.')
    cloudsigma_api_location = scfg.Value(
        None, type=str, help=_usage('cloudsigma_api_location')
    )
    cloudsigma_username = scfg.Value(
        None, type=str, help=_usage('cloudsigma_username')
    )
    cloudsigma_password = scfg.Value(
        None, type=str, help=_usage('cloudsigma_password')
    )
    cloudsigma_cpu = scfg.Value(None, type=int, help=_usage('cloudsigma_cpu'))
    cloudsigma_cpu_type = scfg.Value(
        None, type=str, help=_usage('cloudsigma_cpu_type')
    )
    cloudsigma_cpu_epc_size = scfg.Value(
        None, type=str, help=_usage('cloudsigma_cpu_epc_size')
    )
    cloudsigma_memory = scfg.Value(
        None, type=int, help=_usage('cloudsigma_memory')
    )
    cloudsigma_drive_name = scfg.Value(
        None, type=str, help=_usage('cloudsigma_drive_name')
    )
    cloudsigma_drive_size = scfg.Value(
        None, type=int, help=_usage('cloudsigma_drive_size')
    )
    cloudsigma_drive_uuid = scfg.Value(
        None, type=str, help=_usage('cloudsigma_drive_uuid')
    )
    cloudsigma_static_ip = scfg.Value(
        None, type=str, help=_usage('cloudsigma_static_ip')
    )
    cloudsigma_ssh_user = scfg.Value(
        None, type=str, help=_usage('cloudsigma_ssh_user')
    )
    cloudsigma_ssh_port = scfg.Value(
        None, type=int, help=_usage('cloudsigma_ssh_port')
    )
    cloudsigma_poll_interval = scfg.Value(
        None, type=float, help=_usage('cloudsigma_poll_interval')
    )
    cloudsigma_poll_timeout = scfg.Value(
        None, type=int, help=_usage('cloudsigma_poll_timeout')
    )

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        name = str(args.machine).strip()
        if machine_exists(name, args.storage):
            raise CSMachineError(f'Machine {name} already exists')
        mdir = machine_dir(name, args.storage)
        driver = get_driver(args.driver, name, str(mdir))
        values = {
            f.name: getattr(args, f.attr, None)
            for f in driver.get_create_flags()
        }
        driver.set_config_from_flags(values)
        driver.cfg.verbosity = max(int(args.verbose), 1)
        log.info('Running pre-create checks...')
        driver.pre_create_check()
        ensure_dir(mdir)
        try:
            driver.create()
        finally:
            _save_driver(driver, args.storage)
        print(f'Machine {name} is running at {driver.get_ip()}')
        return 0


class StartCLI(_MachineCommand):
    """Start a stopped machine and wait for its public IP."""

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        driver = _load_driver(args.machine, args.storage)
        try:
            driver.start()
        finally:
            _save_driver(driver, args.storage)
        return 0


class StopCLI(_MachineCommand):
    """Gracefully shut a machine down."""

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        driver = _load_driver(args.machine, args.storage)
        driver.stop()
        return 0


class RestartCLI(_MachineCommand):
    """Shut a machine down and start it again."""

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        driver = _load_driver(args.machine, args.storage)
        try:
            driver.restart()
        finally:
            _save_driver(driver, args.storage)
        return 0


class KillCLI(_MachineCommand):
    """Hard-stop a machine without a guest shutdown."""

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        _load_driver(args.machine, args.storage).kill()
        return 0


class RemoveCLI(_MachineCommand):
    """Delete the server, its drives and SSH key, then the local machine entry."""

    yes = scfg.Value(False, isflag=True, help='Do not ask for confirmation.')
    force = scfg.Value(
        False,
        isflag=True,
        help='Remove the local machine entry even if cloud cleanup fails.',
    )

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        driver = _load_driver(args.machine, args.storage)
        _confirm(
            yes=bool(args.yes),
            purpose=f"About to remove machine '{driver.machine_name}' and its cloud resources.",
        )
        try:
            driver.remove()
        except (CSMachineError, requests.RequestException) as ex:
            if not args.force:
                raise
            log.warning(
                'Cloud cleanup for {} failed, removing local entry anyway: {}',
                driver.machine_name,
                ex,
            )
        remove_machine(driver.machine_name, args.storage)
        print(f'Removed machine {driver.machine_name}')
        return 0


class StatusCLI(_MachineCommand):
    """Print the machine state (Running, Stopped, ...)."""

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        print(_load_driver(args.machine, args.storage).get_state())
        return 0


class IPCLI(_MachineCommand):
    """Print the machine's public IP address."""

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        print(_load_driver(args.machine, args.storage).get_ip())
        return 0


class URLCLI(_MachineCommand):
    """Print the docker daemon URL (empty when not running)."""

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        print(_load_driver(args.machine, args.storage).get_url())
        return 0


class SSHCLI(_MachineCommand):
    """Open an SSH session, or run a command, on the machine."""

    command = scfg.Value('', help='Remote command to run instead of a shell.')

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        driver = _load_driver(args.machine, args.storage)
        ident = require_ssh_key(driver.get_ssh_key_path())
        cmd = [
            'ssh',
            *ssh_base_args(ident, port=driver.get_ssh_port()),
            f'{driver.get_ssh_username()}@{driver.get_ssh_hostname()}',
            *shlex.split(args.command or ''),
        ]
        return run_cmd(cmd, check=False, capture=False).code


class InspectCLI(_MachineCommand):
    """Show the stored machine configuration (password redacted)."""

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        driver = _load_driver(args.machine, args.storage)
        print(dump_toml(driver.cfg, redact=True), end='')
        return 0


class ListCLI(_BaseCommand):
    """List stored machines with their driver, IP and state."""

    quiet = scfg.Value(
        False, isflag=True, short_alias=['q'], help='Only print machine names.'
    )

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        names = list_machines(args.storage)
        if args.quiet:
            for name in names:
                print(name)
            return 0
        if not names:
            print('(no machines)')
            return 0
        for name in names:
            driver = _load_driver(name, args.storage)
            try:
                state = str(driver.get_state()) or 'Unknown'
            except (CSMachineError, requests.RequestException) as ex:
                log.warning('Could not query state of {}: {}', name, ex)
                state = 'Error'
            ip = driver.cfg.resources.ip_address or '-'
            print(f'  - {name} | driver={driver.driver_name()} | ip={ip} | state={state}')
        return 0


class FlagsCLI(_BaseCommand):
    """Show the create flags a driver accepts, with env vars and defaults."""

    driver = scfg.Value('cloudsigma', position=1, help='Driver name.')

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        driver = get_driver(args.driver)
        for flag in driver.get_create_flags():
            default = '' if flag.default in (None, '') else f' (default: {flag.default})'
            print(f'--{flag.name:<28} ${flag.envvar:<26} {flag.usage}{default}')
        return 0


class DriversCLI(_BaseCommand):
    """List registered drivers."""

    @classmethod
    def main(cls, argv=True, **kwargs):
        cls.cli(argv=argv, data=kwargs)
        for name in driver_names():
            print(name)
        return 0
