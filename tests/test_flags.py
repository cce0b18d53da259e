"""Tests for the create flag schema and option resolution."""

from __future__ import annotations

import pytest

from csmachine.errors import ConfigError
from csmachine.flags import CLOUDSIGMA_FLAGS, DriverOptions


def test_flag_schema_names_envvars_and_defaults() -> None:
    by_name = {f.name: f for f in CLOUDSIGMA_FLAGS}
    assert by_name['cloudsigma-cpu'].default == 2000
    assert by_name['cloudsigma-drive-name'].default == 'ubuntu'
    assert by_name['cloudsigma-drive-size'].default == 20
    assert by_name['cloudsigma-memory'].default == 1024
    assert by_name['cloudsigma-ssh-port'].default == 22
    assert by_name['cloudsigma-ssh-user'].default == 'cloudsigma'
    assert by_name['cloudsigma-username'].envvar == 'CLOUDSIGMA_USERNAME'
    assert by_name['cloudsigma-cpu-epc-size'].envvar == 'CLOUDSIGMA_CPU_EPC_SIZE'
    assert by_name['cloudsigma-api-location'].attr == 'cloudsigma_api_location'
    for flag in CLOUDSIGMA_FLAGS:
        assert flag.envvar == flag.attr.upper()


def test_explicit_beats_env_beats_default() -> None:
    env = {'CLOUDSIGMA_CPU': '3000', 'CLOUDSIGMA_MEMORY': '4096'}
    opts = DriverOptions({'cloudsigma_cpu': 1500}, CLOUDSIGMA_FLAGS, environ=env)
    assert opts.int('cloudsigma-cpu') == 1500
    assert opts.int('cloudsigma-memory') == 4096
    assert opts.int('cloudsigma-drive-size') == 20


def test_none_values_fall_through() -> None:
    opts = DriverOptions(
        {'cloudsigma-ssh-user': None}, CLOUDSIGMA_FLAGS, environ={}
    )
    assert opts.string('cloudsigma-ssh-user') == 'cloudsigma'
    assert not opts.is_set('cloudsigma-ssh-user')


def test_is_set_sees_environment() -> None:
    opts = DriverOptions(
        {}, CLOUDSIGMA_FLAGS, environ={'CLOUDSIGMA_DRIVE_NAME': 'debian'}
    )
    assert opts.is_set('cloudsigma-drive-name')
    assert opts.string('cloudsigma-drive-name') == 'debian'
    assert not opts.is_set('cloudsigma-drive-uuid')


def test_bad_numbers_raise_config_error() -> None:
    opts = DriverOptions(
        {'cloudsigma-cpu': 'fast', 'cloudsigma-poll-interval': 'soon'},
        CLOUDSIGMA_FLAGS,
        environ={},
    )
    with pytest.raises(ConfigError, match='--cloudsigma-cpu'):
        opts.int('cloudsigma-cpu')
    with pytest.raises(ConfigError, match='--cloudsigma-poll-interval'):
        opts.float('cloudsigma-poll-interval')


def test_unknown_flag() -> None:
    opts = DriverOptions({}, CLOUDSIGMA_FLAGS, environ={})
    with pytest.raises(ConfigError, match='unknown flag'):
        opts.string('cloudsigma-region')
