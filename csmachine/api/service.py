"""Shared base for the per-resource service objects."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .errors import UnexpectedResponseError

if TYPE_CHECKING:
    from .client import Client


class Service:
    """Holds the client used to reach one resource collection."""

    base_path = ''

    def __init__(self, client: 'Client'):
        self.client = client

    def _get(self, path: str, model: type, params: dict[str, Any] | None = None):
        req = self.client.new_request('GET', path, params=params)
        value, _ = self.client.do(req, model)
        return value

    def _list(self, model: type, params: dict[str, Any] | None = None) -> list:
        req = self.client.new_request('GET', f'{self.base_path}/', params=params)
        data, _ = self.client.do(req, dict)
        objects = (data or {}).get('objects') or []
        return [model.from_json(item) for item in objects]


def single_object(data: Any, model: type, what: str):
    """Decode the one record of an ``{"objects": [...]}`` envelope."""
    objects = (data or {}).get('objects') or []
    if len(objects) != 1:
        raise UnexpectedResponseError(
            f'expected exactly one {what} in response, got {len(objects)}'
        )
    return model.from_json(objects[0])
