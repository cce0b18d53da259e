"""IP address endpoints.

CloudSigma API docs: http://cloudsigma-docs.readthedocs.io/en/latest/networking.html#ips
"""

from __future__ import annotations

from dataclasses import dataclass

from .client import resource_path
from .model import Record, jfield
from .service import Service


@dataclass
class IP(Record):
    gateway: str = jfield('gateway', '', omitempty=True)
    nameservers: list[str] = jfield('nameservers', many=True, omitempty=True)
    netmask: int = jfield('netmask', 0, omitempty=True)
    uuid: str = jfield('uuid', '')


class IPsService(Service):
    base_path = 'ips'

    def get(self, uuid: str) -> IP:
        return self._get(resource_path(self.base_path, uuid), IP)

    def list(self) -> list[IP]:
        return self._list(IP, params={'limit': 0})
