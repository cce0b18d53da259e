"""Keypair (SSH key) endpoints.

CloudSigma API docs: https://cloudsigma-docs.readthedocs.io/en/latest/keypairs.html
"""

from __future__ import annotations

from dataclasses import dataclass

import requests

from .client import resource_path
from .errors import EmptyPayloadError
from .model import Record, jfield
from .service import Service, single_object


@dataclass
class Keypair(Record):
    fingerprint: str = jfield('fingerprint', '', omitempty=True)
    has_private_key: bool = jfield('has_private_key', False, omitempty=True)
    name: str = jfield('name', '')
    private_key: str = jfield('private_key', '', omitempty=True)
    public_key: str = jfield('public_key', '')
    resource_uri: str = jfield('resource_uri', '', omitempty=True)
    uuid: str = jfield('uuid', '', omitempty=True)


@dataclass
class KeypairCreateRequest(Record):
    keypairs: list[Keypair] = jfield('objects', record=Keypair, many=True)


class KeypairsService(Service):
    base_path = 'keypairs'

    def get(self, uuid: str) -> Keypair:
        return self._get(resource_path(self.base_path, uuid), Keypair)

    def list(self) -> list[Keypair]:
        return self._list(Keypair, params={'limit': 0})

    def create(self, request: KeypairCreateRequest) -> Keypair:
        if request is None:
            raise EmptyPayloadError()
        req = self.client.new_request('POST', f'{self.base_path}/', request)
        data, _ = self.client.do(req, dict)
        return single_object(data, Keypair, 'keypair')

    def delete(self, uuid: str) -> requests.Response:
        req = self.client.new_request(
            'DELETE', resource_path(self.base_path, uuid)
        )
        _, resp = self.client.do(req)
        return resp
