"""Servers endpoints.

CloudSigma API docs: http://cloudsigma-docs.readthedocs.io/en/2.14/servers.html
"""

from __future__ import annotations

from dataclasses import dataclass

import requests

from .client import resource_path
from .errors import EmptyArgumentError, EmptyPayloadError
from .model import Record, jfield
from .service import Service, single_object


@dataclass
class Owner(Record):
    resource_uri: str = jfield('resource_uri', '', omitempty=True)
    uuid: str = jfield('uuid', '')


@dataclass
class RuntimeIP(Record):
    uuid: str = jfield('uuid', '')


@dataclass
class RuntimeNIC(Record):
    interface_type: str = jfield('interface_type', '')
    ip_v4: RuntimeIP = jfield(
        'ip_v4', record=RuntimeIP, default_factory=RuntimeIP
    )


@dataclass
class ServerRuntime(Record):
    nics: list[RuntimeNIC] = jfield('nics', record=RuntimeNIC, many=True)


@dataclass
class ServerDrive(Record):
    boot_order: int = jfield('boot_order', 0)
    dev_channel: str = jfield('dev_channel', '')
    device: str = jfield('device', '')
    drive: str = jfield('drive', '')


@dataclass
class Server(Record):
    cpu: int = jfield('cpu', 0)
    cpu_type: str = jfield('cpu_type', '', omitempty=True)
    memory: int = jfield('mem', 0)
    name: str = jfield('name', '')
    owner: Owner = jfield('owner', record=Owner, default_factory=Owner)
    resource_uri: str = jfield('resource_uri', '')
    status: str = jfield('status', '')
    uuid: str = jfield('uuid', '')
    vnc_password: str = jfield('vnc_password', '')
    runtime: ServerRuntime = jfield(
        'runtime', record=ServerRuntime, default_factory=ServerRuntime
    )
    drives: list[ServerDrive] = jfield('drives', record=ServerDrive, many=True)

    def public_ip(self) -> str:
        """Return the IPv4 address of the last public runtime NIC, if any."""
        ip = ''
        for nic in self.runtime.nics:
            if nic.interface_type == 'public' and nic.ip_v4.uuid:
                ip = nic.ip_v4.uuid
        return ip


@dataclass
class IPConfiguration(Record):
    conf: str = jfield('conf', '', omitempty=True)
    ip: str = jfield('ip', '', omitempty=True)


@dataclass
class NIC(Record):
    ip_v4_conf: IPConfiguration = jfield(
        'ip_v4_conf', record=IPConfiguration, default_factory=IPConfiguration
    )
    model: str = jfield('model', '', omitempty=True)


@dataclass
class EnclavePageCache(Record):
    size: int = jfield('size', 0)


@dataclass
class ServerCreateRequest(Record):
    cpu: int = jfield('cpu', 0)
    cpu_type: str = jfield('cpu_type', '', omitempty=True)
    enclave_page_caches: list[EnclavePageCache] = jfield(
        'enclave_page_caches', record=EnclavePageCache, many=True, omitempty=True
    )
    memory: int = jfield('mem', 0)
    name: str = jfield('name', '')
    vnc_password: str = jfield('vnc_password', '')
    nics: list[NIC] = jfield('nics', record=NIC, many=True, omitempty=True)
    public_keys: list[str] = jfield('pubkeys', many=True, omitempty=True)


@dataclass
class AttachDriveRequest(Record):
    cpu: int = jfield('cpu', 0)
    drives: list[ServerDrive] = jfield('drives', record=ServerDrive, many=True)
    memory: int = jfield('mem', 0)
    name: str = jfield('name', '')
    vnc_password: str = jfield('vnc_password', '')


@dataclass
class ServerAction(Record):
    action: str = jfield('action', '')
    result: str = jfield('result', '')
    uuid: str = jfield('uuid', '')


class ServersService(Service):
    """Servers related methods of the CloudSigma API."""

    base_path = 'servers'

    def get(self, uuid: str) -> Server:
        return self._get(resource_path(self.base_path, uuid), Server)

    def list(self) -> list[Server]:
        return self._list(Server, params={'limit': 0})

    def create(self, request: ServerCreateRequest) -> Server:
        if request is None:
            raise EmptyPayloadError()
        req = self.client.new_request(
            'POST', f'{self.base_path}/', {'objects': [request.to_json()]}
        )
        data, _ = self.client.do(req, dict)
        return single_object(data, Server, 'server')

    def attach_drive(self, uuid: str, request: AttachDriveRequest) -> Server:
        """Replace the server definition so that it boots from ``request.drives``."""
        if request is None:
            raise EmptyPayloadError()
        path = resource_path(self.base_path, uuid)
        req = self.client.new_request('PUT', path, request)
        server, _ = self.client.do(req, Server)
        return server

    def delete(self, uuid: str, *, recurse: str = '') -> requests.Response:
        """Delete the server; ``recurse='all_drives'`` also deletes its drives."""
        path = resource_path(self.base_path, uuid)
        params = {'recurse': recurse} if recurse else None
        req = self.client.new_request('DELETE', path, params=params)
        _, resp = self.client.do(req)
        return resp

    def start(self, uuid: str) -> ServerAction:
        return self._do_action(uuid, 'start')

    def stop(self, uuid: str) -> ServerAction:
        return self._do_action(uuid, 'stop')

    def shutdown(self, uuid: str) -> ServerAction:
        return self._do_action(uuid, 'shutdown')

    def _do_action(self, uuid: str, action: str) -> ServerAction:
        if not action:
            raise EmptyArgumentError()
        path = resource_path(self.base_path, uuid, 'action')
        req = self.client.new_request('POST', path, params={'do': action})
        result, _ = self.client.do(req, ServerAction)
        return result
