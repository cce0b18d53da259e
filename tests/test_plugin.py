"""Tests for driver registration and lookup."""

from __future__ import annotations

import pytest

from csmachine import plugin
from csmachine.driver import CloudSigmaDriver
from csmachine.errors import UnknownDriverError


def test_builtin_driver_registered() -> None:
    assert 'cloudsigma' in plugin.driver_names()
    drv = plugin.get_driver('cloudsigma', 'box', '/tmp/box')
    assert isinstance(drv, CloudSigmaDriver)
    assert drv.machine_name == 'box'
    assert drv.store_path == '/tmp/box'
    assert drv.cfg.driver == 'cloudsigma'


def test_unknown_driver() -> None:
    with pytest.raises(UnknownDriverError, match='available drivers: .*cloudsigma'):
        plugin.get_driver('virtualbox')


def test_register_driver(monkeypatch) -> None:
    monkeypatch.setattr(plugin, '_REGISTRY', dict(plugin._REGISTRY))
    seen = {}

    def factory(machine_name, store_path, **kwargs):
        seen.update(name=machine_name, path=store_path, **kwargs)
        return CloudSigmaDriver(machine_name, store_path)

    plugin.register_driver('other', factory)
    plugin.get_driver('other', 'm', '/s', sleep=None)
    assert seen == {'name': 'm', 'path': '/s', 'sleep': None}
    assert 'other' in plugin.driver_names()
    with pytest.raises(ValueError):
        plugin.register_driver('', factory)


def test_entry_points_do_not_override_registered(monkeypatch) -> None:
    class FakeEntryPoint:
        def __init__(self, name):
            self.name = name
            self.value = f'pkg:{name}'

        def load(self):
            return lambda *a, **k: ('loaded', self.name)

    monkeypatch.setattr(plugin, '_REGISTRY', dict(plugin._REGISTRY))
    monkeypatch.setattr(plugin, '_entry_points_loaded', False)
    monkeypatch.setattr(
        plugin,
        'entry_points',
        lambda group: [FakeEntryPoint('cloudsigma'), FakeEntryPoint('extra')],
    )
    assert plugin.driver_names() == ['cloudsigma', 'extra']
    assert plugin._REGISTRY['cloudsigma'] is CloudSigmaDriver
    assert plugin.get_driver('extra') == ('loaded', 'extra')
