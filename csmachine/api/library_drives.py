"""Library drive endpoints.

Library drives are provider-hosted template images that can be cloned into
a drive owned by the account.

CloudSigma API docs: http://cloudsigma-docs.readthedocs.io/en/2.14/libdrives.html
"""

from __future__ import annotations

from dataclasses import dataclass

from .client import resource_path
from .drives import Drive, DriveCloneRequest
from .model import Record, jfield
from .service import Service, single_object


@dataclass
class LibraryDrive(Record):
    arch: str = jfield('arch', '')
    description: str = jfield('description', '', omitempty=True)
    favourite: bool = jfield('favourite', False)
    image_type: str = jfield('image_type', '')
    media: str = jfield('media', '')
    name: str = jfield('name', '')
    os: str = jfield('os', '')
    paid: bool = jfield('paid', False)
    resource_uri: str = jfield('resource_uri', '')
    size: int = jfield('size', 0)
    status: str = jfield('status', '')
    storage_type: str = jfield('storage_type', '')
    uuid: str = jfield('uuid', '')
    version: str = jfield('version', '')


class LibraryDrivesService(Service):
    base_path = 'libdrives'

    def get(self, uuid: str) -> LibraryDrive:
        return self._get(resource_path(self.base_path, uuid), LibraryDrive)

    def list(
        self, *, names_contain: list[str] | None = None, limit: int = 0
    ) -> list[LibraryDrive]:
        """List library drives, optionally filtered by name substrings.

        A ``limit`` of 0 asks the API for every matching drive.
        """
        params: dict = {'limit': limit}
        if names_contain:
            params['name__icontains'] = ','.join(names_contain)
        return self._list(LibraryDrive, params=params)

    def clone(
        self, uuid: str, request: DriveCloneRequest | None = None
    ) -> Drive:
        """Clone library drive ``uuid``; the request body is optional."""
        path = resource_path(self.base_path, uuid, 'action')
        req = self.client.new_request(
            'POST', path, request, params={'do': 'clone'}
        )
        data, _ = self.client.do(req, dict)
        return single_object(data, Drive, 'drive')
