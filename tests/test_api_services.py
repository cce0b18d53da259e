"""Tests for the per-resource services against the fake API session."""

from __future__ import annotations

import json
from urllib.parse import parse_qs, urlsplit

import pytest

from csmachine.api import (
    NIC,
    AttachDriveRequest,
    DriveCloneRequest,
    EmptyArgumentError,
    EmptyPayloadError,
    ErrorResponse,
    IPConfiguration,
    Keypair,
    KeypairCreateRequest,
    ServerCreateRequest,
    ServerDrive,
    UnexpectedResponseError,
)
from fake_cloudsigma import FakeCloudSigmaSession, make_client


@pytest.fixture
def session() -> FakeCloudSigmaSession:
    return FakeCloudSigmaSession()


@pytest.fixture
def client(session):
    return make_client(session)


def _last_body(session: FakeCloudSigmaSession) -> dict:
    return json.loads(session.sent[-1].body)


def _last_query(session: FakeCloudSigmaSession) -> dict:
    return parse_qs(urlsplit(session.sent[-1].url).query)


def test_servers_get_decodes_runtime(session, client) -> None:
    session.add_server(
        uuid='srv-1',
        status='running',
        runtime={
            'nics': [
                {'interface_type': 'private', 'ip_v4': None},
                {'interface_type': 'public', 'ip_v4': {'uuid': '1.2.3.4'}},
                {'interface_type': 'public', 'ip_v4': {'uuid': '5.6.7.8'}},
            ]
        },
    )
    server = client.servers.get('srv-1')
    assert server.status == 'running'
    assert server.memory == 1024**3
    assert server.public_ip() == '5.6.7.8'


def test_servers_public_ip_empty_without_runtime(session, client) -> None:
    session.add_server(uuid='srv-1')
    assert client.servers.get('srv-1').public_ip() == ''


def test_servers_get_missing_is_not_found(client) -> None:
    with pytest.raises(ErrorResponse) as excinfo:
        client.servers.get('nope')
    assert excinfo.value.not_found


def test_servers_list(session, client) -> None:
    session.add_server(name='a')
    session.add_server(name='b')
    assert [s.name for s in client.servers.list()] == ['a', 'b']
    assert _last_query(session) == {'limit': ['0']}


def test_servers_create_wraps_objects(session, client) -> None:
    request = ServerCreateRequest(
        cpu=2000,
        memory=512 * 1024 * 1024,
        name='box',
        vnc_password='cloudsigma',
        nics=[NIC(ip_v4_conf=IPConfiguration(conf='dhcp'), model='virtio')],
        public_keys=['key-1'],
    )
    server = client.servers.create(request)
    assert server.uuid.startswith('server-')
    assert server.name == 'box'
    body = _last_body(session)
    assert body == {
        'objects': [
            {
                'cpu': 2000,
                'mem': 512 * 1024 * 1024,
                'name': 'box',
                'vnc_password': 'cloudsigma',
                'nics': [{'ip_v4_conf': {'conf': 'dhcp'}, 'model': 'virtio'}],
                'pubkeys': ['key-1'],
            }
        ]
    }


def test_servers_create_rejects_empty_payload(client) -> None:
    with pytest.raises(EmptyPayloadError, match='empty payload'):
        client.servers.create(None)


def test_servers_create_rejects_unexpected_envelope(session, client) -> None:
    session.fail('POST', 'servers/', 201, {'objects': []})
    with pytest.raises(UnexpectedResponseError):
        client.servers.create(ServerCreateRequest(name='x'))


def test_servers_attach_drive_puts_definition(session, client) -> None:
    session.add_server(uuid='srv-1', name='box')
    request = AttachDriveRequest(
        cpu=2000,
        memory=1024,
        name='box',
        vnc_password='pw',
        drives=[
            ServerDrive(
                boot_order=1, dev_channel='0:0', device='virtio', drive='drv-1'
            )
        ],
    )
    server = client.servers.attach_drive('srv-1', request)
    assert session.sent[-1].method == 'PUT'
    assert session.paths()[-1] == 'servers/srv-1/'
    assert server.drives[0].drive == 'drv-1'
    assert _last_body(session)['drives'] == [
        {'boot_order': 1, 'dev_channel': '0:0', 'device': 'virtio', 'drive': 'drv-1'}
    ]


@pytest.mark.parametrize('action', ['start', 'stop', 'shutdown'])
def test_servers_actions(session, client, action) -> None:
    session.add_server(uuid='srv-1', status='running')
    result = getattr(client.servers, action)('srv-1')
    assert result.action == action
    assert result.result == 'success'
    assert result.uuid == 'srv-1'
    assert session.paths('POST')[-1] == f'servers/srv-1/action/?do={action}'
    assert session.sent[-1].body is None


def test_servers_action_requires_name_and_uuid(client) -> None:
    with pytest.raises(EmptyArgumentError):
        client.servers._do_action('srv-1', '')
    with pytest.raises(EmptyArgumentError):
        client.servers.start('')


def test_servers_delete_recurse(session, client) -> None:
    session.add_server(uuid='srv-1', drives=[{'drive': 'drv-1'}])
    session.drives['drv-1'] = {'uuid': 'drv-1', 'status': 'mounted'}
    resp = client.servers.delete('srv-1', recurse='all_drives')
    assert resp.status_code == 204
    assert session.paths('DELETE') == ['servers/srv-1/?recurse=all_drives']
    assert 'drv-1' not in session.drives


def test_drives_get_and_delete(session, client) -> None:
    session.drives['drv-1'] = {
        'uuid': 'drv-1',
        'name': 'disk',
        'status': 'unmounted',
        'size': 20 * 1024**3,
        'storage_type': 'dssd',
        'media': 'disk',
    }
    drive = client.drives.get('drv-1')
    assert drive.status == 'unmounted'
    assert drive.size == 20 * 1024**3
    assert client.drives.delete('drv-1').status_code == 204
    with pytest.raises(ErrorResponse) as excinfo:
        client.drives.delete('drv-1')
    assert excinfo.value.not_found


def test_library_drives_list_filters_by_name(session, client) -> None:
    session.add_libdrive(name='Ubuntu 22.04 LTS', version='22.04')
    session.add_libdrive(name='Debian 12', version='12')
    found = client.library_drives.list(names_contain=['ubuntu'])
    assert [d.name for d in found] == ['Ubuntu 22.04 LTS']
    assert _last_query(session) == {'limit': ['0'], 'name__icontains': ['ubuntu']}


def test_library_drives_list_joins_names(session, client) -> None:
    client.library_drives.list(names_contain=['a', 'b'], limit=5)
    assert _last_query(session) == {'limit': ['5'], 'name__icontains': ['a,b']}


def test_library_drives_clone(session, client) -> None:
    lib = session.add_libdrive(uuid='lib-1')
    drive = client.library_drives.clone(
        'lib-1', DriveCloneRequest(name='box', size=30 * 1024**3)
    )
    assert drive.status == 'cloning_dst'
    assert drive.name == 'box'
    assert session.paths('POST')[-1] == 'libdrives/lib-1/action/?do=clone'
    assert _last_body(session) == {'name': 'box', 'size': 30 * 1024**3}
    assert client.library_drives.get('lib-1').version == lib['version']


def test_library_drives_clone_without_body(session, client) -> None:
    session.add_libdrive(uuid='lib-1', name='Ubuntu')
    drive = client.library_drives.clone('lib-1')
    assert drive.name == 'Ubuntu'
    assert session.sent[-1].body is None


def test_ips_get_and_list(session, client) -> None:
    session.ips['185.1.1.1'] = {
        'uuid': '185.1.1.1',
        'gateway': '185.1.1.254',
        'netmask': 24,
        'nameservers': ['8.8.8.8'],
    }
    ip = client.ips.get('185.1.1.1')
    assert ip.gateway == '185.1.1.254'
    assert ip.netmask == 24
    assert ip.nameservers == ['8.8.8.8']
    assert [i.uuid for i in client.ips.list()] == ['185.1.1.1']
    with pytest.raises(ErrorResponse):
        client.ips.get('10.0.0.1')


def test_keypairs_create_list_delete(session, client) -> None:
    key = client.keypairs.create(
        KeypairCreateRequest(
            keypairs=[Keypair(name='box', public_key='ssh-rsa AAAA box')]
        )
    )
    assert key.uuid.startswith('keypair-')
    assert key.public_key == 'ssh-rsa AAAA box'
    assert _last_body(session) == {
        'objects': [{'name': 'box', 'public_key': 'ssh-rsa AAAA box'}]
    }
    assert [k.name for k in client.keypairs.list()] == ['box']
    assert client.keypairs.get(key.uuid).name == 'box'
    assert client.keypairs.delete(key.uuid).status_code == 204
    assert session.keypairs == {}


def test_keypairs_create_rejects_empty_payload(client) -> None:
    with pytest.raises(EmptyPayloadError):
        client.keypairs.create(None)


@pytest.mark.parametrize(
    'call',
    [
        lambda c: c.servers.get(''),
        lambda c: c.servers.attach_drive('', AttachDriveRequest()),
        lambda c: c.servers.delete(''),
        lambda c: c.servers.delete('', recurse='all_drives'),
        lambda c: c.servers.start(''),
        lambda c: c.servers.stop(''),
        lambda c: c.servers.shutdown(''),
        lambda c: c.servers._do_action('srv-1', ''),
        lambda c: c.drives.get(''),
        lambda c: c.drives.delete(''),
        lambda c: c.library_drives.get(''),
        lambda c: c.library_drives.clone(''),
        lambda c: c.library_drives.clone('', DriveCloneRequest(name='x')),
        lambda c: c.ips.get(''),
        lambda c: c.keypairs.get(''),
        lambda c: c.keypairs.delete(''),
    ],
)
def test_empty_uuid_fails_before_sending(session, client, call) -> None:
    with pytest.raises(EmptyArgumentError, match='empty argument'):
        call(client)
    assert session.sent == []


@pytest.mark.parametrize(
    'call',
    [
        lambda c: c.servers.create(None),
        lambda c: c.servers.attach_drive('srv-1', None),
        lambda c: c.keypairs.create(None),
    ],
)
def test_empty_payload_fails_before_sending(session, client, call) -> None:
    with pytest.raises(EmptyPayloadError, match='empty payload'):
        call(client)
    assert session.sent == []
