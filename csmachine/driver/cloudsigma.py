"""CloudSigma provisioning driver: keypair, drive clone, server, start, teardown."""

from __future__ import annotations

import ipaddress
import re
from typing import Any, Callable

from loguru import logger

from ..api import (
    NIC,
    AttachDriveRequest,
    Client,
    Drive,
    DriveCloneRequest,
    EnclavePageCache,
    ErrorResponse,
    IPConfiguration,
    Keypair,
    KeypairCreateRequest,
    LibraryDrive,
    Server,
    ServerCreateRequest,
    ServerDrive,
)
from ..config import MachineConfig
from ..errors import ConfigError, CSMachineError
from ..flags import CLOUDSIGMA_FLAGS, DriverOptions, Flag
from ..ssh import generate_ssh_key, read_public_key
from ..state import State, from_server_status
from .base import BaseDriver

log = logger

GIB = 1024 * 1024 * 1024
MIB = 1024 * 1024

# No stable docker engine repository exists for these releases.
EXCLUDED_LIBRARY_DRIVES = ('Ubuntu 20.10',)


def default_client(cfg: MachineConfig) -> Client:
    client = Client(cfg.api.username, cfg.api.password)
    client.set_location(cfg.api.location)
    return client


def _version_key(version: str) -> tuple:
    parts = re.findall(r'\d+|[A-Za-z]+', version or '')
    return tuple((0, int(p)) if p.isdigit() else (1, p) for p in parts)


def pick_library_drive(drives: list[LibraryDrive]) -> LibraryDrive | None:
    """Return the newest pre-installed image; earlier entries win ties."""
    best: LibraryDrive | None = None
    for ld in drives:
        if ld.image_type != 'preinst':
            continue
        if any(bad in ld.name for bad in EXCLUDED_LIBRARY_DRIVES):
            log.debug(
                'Skip library drive {} ({}), no stable provisioning channel',
                ld.uuid,
                ld.name,
            )
            continue
        if best is None or _version_key(best.version) < _version_key(ld.version):
            best = ld
    return best


class CloudSigmaDriver(BaseDriver):
    """Provision docker hosts as CloudSigma servers.

    Example:
        >>> driver = CloudSigmaDriver('default', '/tmp/machines/default')
        >>> driver.driver_name()
        'cloudsigma'
        >>> driver.get_ssh_key_path()
        '/tmp/machines/default/id_rsa'
    """

    name = 'cloudsigma'

    def __init__(
        self,
        machine_name: str = '',
        store_path: str = '',
        *,
        cfg: MachineConfig | None = None,
        client_factory: Callable[[MachineConfig], Client] | None = None,
        **kwargs: Any,
    ):
        super().__init__(machine_name, store_path, cfg=cfg, **kwargs)
        self._client_factory = client_factory or default_client

    def client(self) -> Client:
        return self._client_factory(self.cfg)

    def get_create_flags(self) -> list[Flag]:
        return list(CLOUDSIGMA_FLAGS)

    def set_config_from_flags(self, opts: DriverOptions | dict[str, Any]) -> None:
        if not isinstance(opts, DriverOptions):
            opts = DriverOptions(opts, self.get_create_flags())
        c = self.cfg
        c.api.location = opts.string('cloudsigma-api-location')
        c.api.username = opts.string('cloudsigma-username')
        c.api.password = opts.string('cloudsigma-password')
        c.server.cpu = opts.int('cloudsigma-cpu')
        c.server.cpu_type = opts.string('cloudsigma-cpu-type')
        c.server.cpu_epc_size = opts.string('cloudsigma-cpu-epc-size')
        c.server.memory_mb = opts.int('cloudsigma-memory')
        c.server.static_ip = opts.string('cloudsigma-static-ip')
        c.drive.name = opts.string('cloudsigma-drive-name')
        c.drive.size_gb = opts.int('cloudsigma-drive-size')
        c.drive.uuid = opts.string('cloudsigma-drive-uuid')
        c.ssh.port = opts.int('cloudsigma-ssh-port')
        c.ssh.user = opts.string('cloudsigma-ssh-user')
        c.poll.interval_s = opts.float('cloudsigma-poll-interval')
        c.poll.timeout_s = opts.int('cloudsigma-poll-timeout')

        if not c.api.username:
            raise ConfigError(
                'cloudsigma driver requires the --cloudsigma-username option'
            )
        if not c.api.password:
            raise ConfigError(
                'cloudsigma driver requires the --cloudsigma-password option'
            )
        if c.drive.uuid and not opts.is_set('cloudsigma-drive-name'):
            c.drive.name = ''
        if c.drive.name and c.drive.uuid:
            raise ConfigError(
                '--cloudsigma-drive-name and --cloudsigma-drive-uuid are mutually exclusive'
            )
        if not c.drive.name and not c.drive.uuid:
            raise ConfigError(
                'cloudsigma driver requires --cloudsigma-drive-name or --cloudsigma-drive-uuid'
            )
        if c.server.cpu_epc_size and not c.server.cpu_epc_size.isdigit():
            raise ConfigError(
                f'--cloudsigma-cpu-epc-size must be a size in bytes, got {c.server.cpu_epc_size!r}'
            )
        if c.poll.interval_s <= 0:
            raise ConfigError('--cloudsigma-poll-interval must be positive')
        if c.poll.timeout_s < 0:
            raise ConfigError('--cloudsigma-poll-timeout must not be negative')

    def pre_create_check(self) -> None:
        static_ip = self.cfg.server.static_ip
        if not static_ip:
            return
        try:
            ipaddress.ip_address(static_ip)
        except ValueError:
            raise ConfigError(
                f'{static_ip} is not a valid textual representation of an IP address'
            ) from None
        self.client().ips.get(static_ip)

    def create(self) -> None:
        client = self.client()
        res = self.cfg.resources

        log.info('Creating SSH key...')
        key = self._create_ssh_key(client)
        res.ssh_key_uuid = key.uuid

        log.info('Cloning CloudSigma library drive...')
        drive = self._clone_library_drive(client)
        res.cloned_drive_uuid = drive.uuid

        log.info('Creating CloudSigma server...')
        server = self._create_server(client)
        res.server_uuid = server.uuid

        log.info('Starting CloudSigma server...')
        self._start_server(client)

        log.debug(
            'Created server UUID {}, drive UUID {}, IP address {}',
            res.server_uuid,
            res.cloned_drive_uuid,
            res.ip_address,
        )

    def start(self) -> None:
        self._start_server(self.client())

    def stop(self) -> None:
        self._stop_server(self.client())

    def restart(self) -> None:
        client = self.client()
        self._stop_server(client)
        self._start_server(client)

    def kill(self) -> None:
        self.client().servers.stop(self._server_uuid())

    def get_state(self) -> State:
        if not self.cfg.resources.server_uuid:
            return State.NONE
        server = self.client().servers.get(self.cfg.resources.server_uuid)
        return from_server_status(server.status)

    def remove(self) -> None:
        client = self.client()
        res = self.cfg.resources

        if res.server_uuid:
            log.info('Stopping CloudSigma server...')
            self._ignore_missing(
                lambda: self._stop_server(client),
                "CloudSigma server doesn't exist, assuming it is already deleted",
            )

        if res.ssh_key_uuid:
            log.info('Deleting SSH key...')
            self._ignore_missing(
                lambda: client.keypairs.delete(res.ssh_key_uuid),
                "SSH key doesn't exist, assuming it is already deleted",
            )

        if res.server_uuid:
            log.info('Deleting CloudSigma server...')
            self._ignore_missing(
                lambda: client.servers.delete(
                    res.server_uuid, recurse='all_drives'
                ),
                "CloudSigma server doesn't exist, assuming it is already deleted",
            )

        # Only drives attached to the server go with recurse=all_drives.
        if res.cloned_drive_uuid:
            log.info('Deleting cloned CloudSigma drive...')
            self._ignore_missing(
                lambda: client.drives.delete(res.cloned_drive_uuid),
                "CloudSigma drive doesn't exist, assuming it is already deleted",
            )

    def _server_uuid(self) -> str:
        uuid = self.cfg.resources.server_uuid
        if not uuid:
            raise CSMachineError(
                f'Machine {self.machine_name} has no CloudSigma server'
            )
        return uuid

    @staticmethod
    def _ignore_missing(fn: Callable[[], Any], message: str) -> None:
        try:
            fn()
        except ErrorResponse as ex:
            if not ex.not_found:
                raise
            log.info(message)

    def _create_ssh_key(self, client: Client) -> Keypair:
        key_path = self.get_ssh_key_path()
        generate_ssh_key(key_path, comment=self.machine_name)
        request = KeypairCreateRequest(
            keypairs=[
                Keypair(
                    name=self.machine_name,
                    public_key=read_public_key(key_path),
                )
            ]
        )
        return client.keypairs.create(request)

    def _library_drive_uuid(self, client: Client) -> str:
        if self.cfg.drive.uuid:
            return self.cfg.drive.uuid
        name = self.cfg.drive.name
        drives = client.library_drives.list(names_contain=[name], limit=0)
        found = pick_library_drive(drives)
        if found is None:
            raise CSMachineError(
                f'could not find any library drive with name {name}'
            )
        log.debug(
            'Found library drive: {}, version: {}, UUID: {}',
            name,
            found.version,
            found.uuid,
        )
        return found.uuid

    def _clone_library_drive(self, client: Client) -> Drive:
        source_uuid = self._library_drive_uuid(client)
        request = DriveCloneRequest(
            name=self.machine_name,
            size=int(self.cfg.drive.size_gb) * GIB,
            storage_type=self.cfg.drive.storage_type,
        )
        cloned = client.library_drives.clone(source_uuid, request)
        self.cfg.resources.cloned_drive_uuid = cloned.uuid

        log.debug('Waiting until cloning process is done...')
        self.wait_for(
            lambda: client.drives.get(cloned.uuid),
            lambda drive: drive.status == 'unmounted',
            what=f'drive {cloned.uuid} to finish cloning',
        )
        log.debug('Created drive UUID {}', cloned.uuid)
        return cloned

    def _create_server(self, client: Client) -> Server:
        c = self.cfg
        nic = NIC(ip_v4_conf=IPConfiguration(conf='dhcp'), model='virtio')
        if c.server.static_ip:
            log.debug(
                'Static ip address is defined {}, use it for NIC configuration.',
                c.server.static_ip,
            )
            nic.ip_v4_conf = IPConfiguration(conf='static', ip=c.server.static_ip)
        request = ServerCreateRequest(
            cpu=int(c.server.cpu),
            cpu_type=c.server.cpu_type,
            memory=int(c.server.memory_mb) * MIB,
            name=self.machine_name,
            nics=[nic],
            public_keys=[c.resources.ssh_key_uuid],
            vnc_password=c.server.vnc_password,
        )
        if c.server.cpu_epc_size:
            log.debug(
                'CPU enclave page cache is defined {}, use it by server creation.',
                c.server.cpu_epc_size,
            )
            request.enclave_page_caches = [
                EnclavePageCache(size=int(c.server.cpu_epc_size))
            ]

        log.debug('Creating CloudSigma virtual server...')
        server = client.servers.create(request)
        c.resources.server_uuid = server.uuid

        attach = AttachDriveRequest(
            cpu=server.cpu,
            drives=[
                ServerDrive(
                    boot_order=1,
                    dev_channel='0:0',
                    device='virtio',
                    drive=c.resources.cloned_drive_uuid,
                )
            ],
            memory=server.memory,
            name=server.name,
            vnc_password=server.vnc_password,
        )
        log.debug('Attaching existing drive to virtual server...')
        return client.servers.attach_drive(server.uuid, attach)

    def _start_server(self, client: Client) -> None:
        uuid = self._server_uuid()
        log.debug('Checking server state...')
        server = client.servers.get(uuid)
        if server.status == 'running':
            log.debug('Server is already running')
            if server.public_ip():
                self.cfg.resources.ip_address = server.public_ip()
            return

        log.debug('Starting CloudSigma virtual server...')
        client.servers.start(uuid)

        self.cfg.resources.ip_address = ''
        log.debug('Waiting for IP address to be assigned to the server...')
        server = self.wait_for(
            lambda: client.servers.get(uuid),
            lambda s: bool(s.public_ip()) and s.status == 'running',
            what=f'server {uuid} to run with a public IP',
        )
        self.cfg.resources.ip_address = server.public_ip()
        log.info('Server {} is running at {}', uuid, self.cfg.resources.ip_address)

    def _stop_server(self, client: Client) -> None:
        uuid = self._server_uuid()
        log.debug('Checking server state...')
        server = client.servers.get(uuid)
        if server.status == 'stopped':
            log.debug('Server is already stopped')
            return

        log.debug('Stopping CloudSigma virtual server...')
        client.servers.shutdown(uuid)

        def _stopped(s: Server) -> bool:
            if s.status == 'running':
                raise CSMachineError(f'could not stop server {uuid}')
            return s.status == 'stopped'

        log.debug('Waiting until server is stopped...')
        self.wait_for(
            lambda: client.servers.get(uuid),
            _stopped,
            what=f'server {uuid} to stop',
        )
