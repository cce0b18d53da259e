"""Dataclass base for request/response records mirroring the API schema."""

from __future__ import annotations

import dataclasses
from typing import Any, ClassVar


def jfield(
    key: str,
    default: Any = None,
    *,
    omitempty: bool = False,
    record: type | None = None,
    many: bool = False,
    default_factory: Any = None,
) -> Any:
    """Declare a record field backed by JSON key ``key``.

    ``record`` names a nested record class; with ``many`` the value is a
    list of them. Fields marked ``omitempty`` are left out of the encoded
    body when falsy.
    """
    meta = {'json': key, 'omitempty': omitempty, 'record': record, 'many': many}
    if many and default_factory is None:
        default_factory = list
    if default_factory is not None:
        return dataclasses.field(default_factory=default_factory, metadata=meta)
    return dataclasses.field(default=default, metadata=meta)


class Record:
    """Mixin giving a dataclass ``from_json`` and ``to_json``."""

    __dataclass_fields__: ClassVar[dict[str, dataclasses.Field]]

    @classmethod
    def from_json(cls, data: dict[str, Any] | None):
        data = data or {}
        kwargs = {}
        for f in dataclasses.fields(cls):
            key = f.metadata.get('json', f.name)
            if key not in data or data[key] is None:
                continue
            value = data[key]
            sub = f.metadata.get('record')
            if sub is not None:
                if f.metadata.get('many'):
                    value = [sub.from_json(item) for item in value]
                elif isinstance(value, dict):
                    value = sub.from_json(value)
            kwargs[f.name] = value
        return cls(**kwargs)

    def to_json(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if f.metadata.get('omitempty') and not value:
                continue
            if isinstance(value, Record):
                value = value.to_json()
            elif isinstance(value, list):
                value = [v.to_json() if isinstance(v, Record) else v for v in value]
            out[f.metadata.get('json', f.name)] = value
        return out
