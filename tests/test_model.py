"""Tests for JSON record encoding."""

from __future__ import annotations

from csmachine.api import (
    NIC,
    DriveCloneRequest,
    EnclavePageCache,
    IPConfiguration,
    LibraryDrive,
    Server,
    ServerCreateRequest,
)


def test_from_json_ignores_unknown_and_null_keys() -> None:
    drive = LibraryDrive.from_json(
        {
            'uuid': 'lib-1',
            'name': 'Ubuntu',
            'description': None,
            'licenses': [],
            'favourite': True,
        }
    )
    assert drive.uuid == 'lib-1'
    assert drive.description == ''
    assert drive.favourite is True


def test_from_json_empty_input_gives_defaults() -> None:
    server = Server.from_json(None)
    assert server.uuid == ''
    assert server.runtime.nics == []
    assert server.drives == []


def test_to_json_omits_empty_optional_fields() -> None:
    assert DriveCloneRequest().to_json() == {}
    assert DriveCloneRequest(storage_type='dssd').to_json() == {
        'storage_type': 'dssd'
    }


def test_nested_records_encode() -> None:
    req = ServerCreateRequest(
        cpu=1000,
        cpu_type='intel',
        memory=2,
        name='n',
        enclave_page_caches=[EnclavePageCache(size=512)],
        nics=[
            NIC(ip_v4_conf=IPConfiguration(conf='static', ip='185.1.2.3'), model='virtio')
        ],
    )
    data = req.to_json()
    assert data['cpu_type'] == 'intel'
    assert data['enclave_page_caches'] == [{'size': 512}]
    assert data['nics'] == [
        {'ip_v4_conf': {'conf': 'static', 'ip': '185.1.2.3'}, 'model': 'virtio'}
    ]
    assert 'pubkeys' not in data
