"""HTTP client for the CloudSigma 2.0 REST API."""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import quote, urljoin, urlsplit

import requests
from loguru import logger

from .errors import ClientError, EmptyArgumentError, ErrorElement, ErrorResponse
from .model import Record

log = logger

DEFAULT_LOCATION = 'zrh'
DEFAULT_BASE_URL = f'https://{DEFAULT_LOCATION}.cloudsigma.com/api/2.0/'
USER_AGENT = 'csmachine-driver-cloudsigma'
MEDIA_TYPE = 'application/json'
DEFAULT_TIMEOUT = 60


def base_url_for_location(location: str) -> str:
    return f'https://{location}.cloudsigma.com/api/2.0/'


def resource_path(base: str, uuid: str, *parts: str) -> str:
    """Build ``base/uuid/part/.../`` with the uuid percent-quoted."""
    if not uuid:
        raise EmptyArgumentError()
    segments = [base, quote(uuid, safe=''), *parts]
    return '/'.join(segments) + '/'


class Client:
    """Manages communication with the CloudSigma API.

    Services for each resource type hang off the client as attributes, e.g.
    ``client.servers.get(uuid)``. Every request carries HTTP basic auth for
    ``username`` (the account email) and ``password``.

    Example:
        >>> client = Client('user@example.com', 'secret')
        >>> client.base_url
        'https://zrh.cloudsigma.com/api/2.0/'
        >>> client.set_location('wdc')
        >>> client.base_url
        'https://wdc.cloudsigma.com/api/2.0/'
    """

    def __init__(
        self,
        username: str,
        password: str,
        *,
        base_url: str | None = None,
        user_agent: str = USER_AGENT,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        from .drives import DrivesService
        from .ips import IPsService
        from .keypairs import KeypairsService
        from .library_drives import LibraryDrivesService
        from .servers import ServersService

        self.username = username
        self.password = password
        self.base_url = base_url or DEFAULT_BASE_URL
        self.user_agent = user_agent
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

        self.drives = DrivesService(self)
        self.ips = IPsService(self)
        self.keypairs = KeypairsService(self)
        self.library_drives = LibraryDrivesService(self)
        self.servers = ServersService(self)

    def set_location(self, location: str) -> None:
        if not location:
            return
        self.base_url = base_url_for_location(location)

    def new_request(
        self,
        method: str,
        path: str,
        body: Record | dict | list | None = None,
        params: dict[str, Any] | None = None,
    ) -> requests.PreparedRequest:
        """Create an API request for ``path`` relative to :attr:`base_url`.

        Relative paths must be given without a leading slash. When ``body``
        is given it is JSON encoded into the request body.
        """
        if not urlsplit(self.base_url).path.endswith('/'):
            raise ClientError(
                f'base_url must have a trailing slash, but {self.base_url!r} does not'
            )
        url = urljoin(self.base_url, path)
        data = None
        if body is not None:
            payload = body.to_json() if isinstance(body, Record) else body
            data = json.dumps(payload)
        req = requests.Request(
            method,
            url,
            params=params,
            data=data,
            auth=(self.username, self.password),
            headers={
                'Content-Type': MEDIA_TYPE,
                'Accept': MEDIA_TYPE,
                'User-Agent': self.user_agent,
            },
        )
        return self.session.prepare_request(req)

    def do(self, request: requests.PreparedRequest, model: type | None = None):
        """Send ``request`` and decode the response into ``model``.

        Returns ``(value, response)``. ``value`` is None when no model is
        given or the body is empty. Non-2xx responses raise
        :class:`ErrorResponse`.
        """
        log.debug('API {} {}', request.method, request.url)
        resp = self.session.send(request, timeout=self.timeout)
        check_response(resp)
        if model is None or not resp.content:
            return None, resp
        data = resp.json()
        if isinstance(model, type) and issubclass(model, Record):
            return model.from_json(data), resp
        return data, resp


def check_response(resp: requests.Response) -> None:
    """Raise :class:`ErrorResponse` if ``resp`` is outside the 2xx range."""
    if 200 <= resp.status_code <= 299:
        return
    text = resp.text if resp.content else ''
    elements: list[ErrorElement] = []
    raw = ''
    if text:
        try:
            data = json.loads(text)
        except ValueError:
            data = None
        if isinstance(data, list):
            elements = [
                ErrorElement.from_json(item)
                for item in data
                if isinstance(item, dict)
            ]
        else:
            raw = text
    log.debug('API error status={} elements={}', resp.status_code, elements)
    raise ErrorResponse(resp, elements, body=raw)
