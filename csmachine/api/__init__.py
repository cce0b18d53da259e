"""CloudSigma REST API client and resource records."""

from __future__ import annotations

from .client import (
    DEFAULT_BASE_URL,
    USER_AGENT,
    Client,
    base_url_for_location,
    check_response,
)
from .drives import Drive, DriveCloneRequest
from .errors import (
    APIError,
    ClientError,
    EmptyArgumentError,
    EmptyPayloadError,
    ErrorElement,
    ErrorResponse,
    UnexpectedResponseError,
)
from .ips import IP
from .keypairs import Keypair, KeypairCreateRequest
from .library_drives import LibraryDrive
from .servers import (
    NIC,
    AttachDriveRequest,
    EnclavePageCache,
    IPConfiguration,
    Server,
    ServerAction,
    ServerCreateRequest,
    ServerDrive,
)

__all__ = [
    'APIError',
    'AttachDriveRequest',
    'Client',
    'ClientError',
    'DEFAULT_BASE_URL',
    'Drive',
    'DriveCloneRequest',
    'EmptyArgumentError',
    'EmptyPayloadError',
    'EnclavePageCache',
    'ErrorElement',
    'ErrorResponse',
    'IP',
    'IPConfiguration',
    'Keypair',
    'KeypairCreateRequest',
    'LibraryDrive',
    'NIC',
    'Server',
    'ServerAction',
    'ServerCreateRequest',
    'ServerDrive',
    'USER_AGENT',
    'UnexpectedResponseError',
    'base_url_for_location',
    'check_response',
]
