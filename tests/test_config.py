"""Tests for machine config TOML serialization."""

from __future__ import annotations

import tomllib
from pathlib import Path

from csmachine.config import MachineConfig, dump_toml, from_dict, load, save


def test_config_roundtrip(tmp_path: Path) -> None:
    cfg = MachineConfig(name='box', store_path=str(tmp_path / 'box'))
    cfg.api.username = 'me@example.com'
    cfg.api.password = 'p"w\\d'
    cfg.server.cpu = 4000
    cfg.server.static_ip = '185.1.2.3'
    cfg.drive.uuid = 'lib-1'
    cfg.drive.name = ''
    cfg.poll.interval_s = 0.5
    cfg.resources.server_uuid = 'srv-1'
    cfg.resources.ip_address = '185.1.2.3'
    cfg.verbosity = 2

    fpath = tmp_path / 'config.toml'
    save(fpath, cfg)
    loaded = load(fpath)
    assert loaded == cfg


def test_dump_redacts_password() -> None:
    cfg = MachineConfig(name='box')
    cfg.api.password = 'secret'
    text = dump_toml(cfg, redact=True)
    assert 'secret' not in text
    assert 'password = "********"' in text
    assert 'secret' in dump_toml(cfg)


def test_dump_is_valid_toml_with_sections() -> None:
    raw = tomllib.loads(dump_toml(MachineConfig(name='box')))
    assert raw['name'] == 'box'
    assert raw['driver'] == 'cloudsigma'
    assert raw['drive']['name'] == 'ubuntu'
    assert raw['ssh']['user'] == 'cloudsigma'
    assert raw['resources']['server_uuid'] == ''
    assert 'verbosity' not in raw


def test_from_dict_ignores_unknown_keys() -> None:
    cfg = from_dict(
        {
            'name': 'box',
            'server': {'cpu': 1000, 'gpu': 1},
            'extra': {'x': 1},
        }
    )
    assert cfg.server.cpu == 1000
    assert not hasattr(cfg.server, 'gpu')
    assert cfg.drive.size_gb == 20


def test_control_characters_roundtrip(tmp_path: Path) -> None:
    cfg = MachineConfig(name='box')
    cfg.api.password = 'line1\nline2\ttab\r\x00\x1b\x7f"\\'
    cfg.server.cpu_type = 'amd\x08\x0c'
    fpath = tmp_path / 'config.toml'
    save(fpath, cfg)
    loaded = load(fpath)
    assert loaded.api.password == cfg.api.password
    assert loaded.server.cpu_type == cfg.server.cpu_type
