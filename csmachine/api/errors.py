"""Error types raised by the CloudSigma API client.

CloudSigma reports failures as a JSON array of error elements, e.g.::

    [{"error_point": null, "error_type": "notexist",
      "error_message": "Object with uuid ... does not exist"}]

See http://cloudsigma-docs.readthedocs.io/en/latest/errors.html
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import requests

from ..errors import CSMachineError


class APIError(CSMachineError):
    """Base error for CloudSigma API failures."""


class ClientError(APIError):
    """Raised when a request cannot be built."""


class EmptyArgumentError(APIError, ValueError):
    def __init__(self, message: str = '(api) empty argument not allowed'):
        super().__init__(message)


class EmptyPayloadError(APIError, ValueError):
    def __init__(self, message: str = '(api) empty payload not allowed'):
        super().__init__(message)


class UnexpectedResponseError(APIError):
    """Raised when a response body does not have the expected shape."""


@dataclass
class ErrorElement:
    message: str = ''
    point: str = ''
    type: str = ''

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> 'ErrorElement':
        return cls(
            message=data.get('error_message') or '',
            point=data.get('error_point') or '',
            type=data.get('error_type') or '',
        )


class ErrorResponse(APIError):
    """One or more errors caused by an API request.

    ``response`` is the :class:`requests.Response` that caused the error and
    ``error_elements`` the elements decoded from its body, in server order.
    ``body`` keeps the raw text when the body was not a JSON array.
    """

    def __init__(
        self,
        response: requests.Response,
        error_elements: list[ErrorElement] | None = None,
        body: str = '',
    ):
        self.response = response
        self.error_elements = list(error_elements or [])
        self.body = body
        super().__init__(self._describe())

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def not_found(self) -> bool:
        return self.status_code == 404

    def _describe(self) -> str:
        req = self.response.request
        method = getattr(req, 'method', '') or ''
        url = getattr(req, 'url', '') or self.response.url or ''
        if self.error_elements:
            detail = '; '.join(
                f'{e.type}: {e.message}' if e.type else e.message
                for e in self.error_elements
            )
        else:
            detail = self.body.strip()
        return f'{method} {url}: {self.status_code} {detail}'.strip()
