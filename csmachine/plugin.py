"""Driver registration: map driver names to factories.

The built-in CloudSigma driver is registered at import time. Other packages
can contribute drivers through the ``csmachine.drivers`` entry-point group;
each entry point must resolve to a callable accepting
``(machine_name, store_path, **kwargs)``.
"""

from __future__ import annotations

from importlib.metadata import entry_points
from typing import Any, Callable

from loguru import logger

from .driver import BaseDriver, CloudSigmaDriver
from .errors import UnknownDriverError

log = logger

ENTRY_POINT_GROUP = 'csmachine.drivers'

DriverFactory = Callable[..., BaseDriver]

_REGISTRY: dict[str, DriverFactory] = {}
_entry_points_loaded = False


def register_driver(name: str, factory: DriverFactory) -> None:
    if not name:
        raise ValueError('driver name must not be empty')
    _REGISTRY[name] = factory


def _load_entry_points() -> None:
    global _entry_points_loaded
    if _entry_points_loaded:
        return
    _entry_points_loaded = True
    for ep in entry_points(group=ENTRY_POINT_GROUP):
        if ep.name in _REGISTRY:
            continue
        log.debug('Loading driver {} from {}', ep.name, ep.value)
        _REGISTRY[ep.name] = ep.load()


def driver_names() -> list[str]:
    _load_entry_points()
    return sorted(_REGISTRY)


def get_driver(
    name: str, machine_name: str = '', store_path: str = '', **kwargs: Any
) -> BaseDriver:
    _load_entry_points()
    try:
        factory = _REGISTRY[name]
    except KeyError:
        known = ', '.join(sorted(_REGISTRY)) or '(none)'
        raise UnknownDriverError(
            f'Unknown driver {name!r}; available drivers: {known}'
        ) from None
    return factory(machine_name, store_path, **kwargs)


register_driver(CloudSigmaDriver.name, CloudSigmaDriver)
