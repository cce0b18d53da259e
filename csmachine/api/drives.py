"""Drives endpoints.

CloudSigma API docs: http://cloudsigma-docs.readthedocs.io/en/2.14/drives.html
"""

from __future__ import annotations

from dataclasses import dataclass

import requests

from .client import resource_path
from .model import Record, jfield
from .service import Service


@dataclass
class Drive(Record):
    media: str = jfield('media', '')
    name: str = jfield('name', '')
    resource_uri: str = jfield('resource_uri', '')
    size: int = jfield('size', 0)
    status: str = jfield('status', '')
    storage_type: str = jfield('storage_type', '')
    uuid: str = jfield('uuid', '')


@dataclass
class DriveCloneRequest(Record):
    media: str = jfield('media', '', omitempty=True)
    name: str = jfield('name', '', omitempty=True)
    size: int = jfield('size', 0, omitempty=True)
    storage_type: str = jfield('storage_type', '', omitempty=True)


class DrivesService(Service):
    """Drives related methods of the CloudSigma API."""

    base_path = 'drives'

    def get(self, uuid: str) -> Drive:
        return self._get(resource_path(self.base_path, uuid), Drive)

    def delete(self, uuid: str) -> requests.Response:
        req = self.client.new_request(
            'DELETE', resource_path(self.base_path, uuid)
        )
        _, resp = self.client.do(req)
        return resp
