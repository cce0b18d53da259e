from __future__ import annotations

import tomllib
from dataclasses import asdict, dataclass, field
from pathlib import Path

from .util import expand

DEFAULT_CPU = 2000
DEFAULT_DRIVE_NAME = 'ubuntu'
DEFAULT_DRIVE_SIZE = 20
DEFAULT_MEMORY = 1024
DEFAULT_SSH_PORT = 22
DEFAULT_SSH_USER = 'cloudsigma'
DEFAULT_VNC_PASSWORD = 'cloudsigma'
DEFAULT_STORAGE_TYPE = 'dssd'

SECTIONS = ('api', 'server', 'drive', 'ssh', 'poll', 'resources')


@dataclass
class APIConfig:
    location: str = ''
    username: str = ''
    password: str = ''


@dataclass
class ServerConfig:
    cpu: int = DEFAULT_CPU
    cpu_type: str = ''
    cpu_epc_size: str = ''
    memory_mb: int = DEFAULT_MEMORY
    static_ip: str = ''
    vnc_password: str = DEFAULT_VNC_PASSWORD


@dataclass
class DriveConfig:
    name: str = DEFAULT_DRIVE_NAME
    uuid: str = ''
    size_gb: int = DEFAULT_DRIVE_SIZE
    storage_type: str = DEFAULT_STORAGE_TYPE


@dataclass
class SSHConfig:
    user: str = DEFAULT_SSH_USER
    port: int = DEFAULT_SSH_PORT
    key_path: str = ''


@dataclass
class PollConfig:
    interval_s: float = 1.0
    # 0 waits forever
    timeout_s: int = 0


@dataclass
class ResourceState:
    server_uuid: str = ''
    cloned_drive_uuid: str = ''
    ssh_key_uuid: str = ''
    ip_address: str = ''


@dataclass
class MachineConfig:
    name: str = ''
    driver: str = 'cloudsigma'
    store_path: str = ''
    api: APIConfig = field(default_factory=APIConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    drive: DriveConfig = field(default_factory=DriveConfig)
    ssh: SSHConfig = field(default_factory=SSHConfig)
    poll: PollConfig = field(default_factory=PollConfig)
    resources: ResourceState = field(default_factory=ResourceState)
    verbosity: int = 1

    def expanded_paths(self) -> 'MachineConfig':
        self.store_path = expand(self.store_path) if self.store_path else ''
        self.ssh.key_path = expand(self.ssh.key_path) if self.ssh.key_path else ''
        return self


_TOML_ESCAPES = {
    '\\': '\\\\',
    '"': '\\"',
    '\b': '\\b',
    '\t': '\\t',
    '\n': '\\n',
    '\f': '\\f',
    '\r': '\\r',
}


def _toml_escape(s: str) -> str:
    out = []
    for ch in s:
        if ch in _TOML_ESCAPES:
            out.append(_TOML_ESCAPES[ch])
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            out.append(f'\\u{ord(ch):04X}')
        else:
            out.append(ch)
    return ''.join(out)


def _emit(key: str, v: object) -> str:
    if isinstance(v, bool):
        return f"{key} = {'true' if v else 'false'}"
    if isinstance(v, (int, float)):
        return f'{key} = {v}'
    if isinstance(v, list):
        parts = [f'"{_toml_escape(str(item))}"' for item in v]
        return f"{key} = [{', '.join(parts)}]"
    return f'{key} = "{_toml_escape(str(v))}"'


def dump_toml(cfg: MachineConfig, *, redact: bool = False) -> str:
    d = asdict(cfg)
    lines: list[str] = []
    for key in ('name', 'driver', 'store_path'):
        lines.append(_emit(key, d[key]))
    if d['verbosity'] != 1:
        lines.append(_emit('verbosity', d['verbosity']))
    lines.append('')
    for section in SECTIONS:
        lines.append(f'[{section}]')
        for k, v in d[section].items():
            if redact and section == 'api' and k == 'password' and v:
                v = '********'
            lines.append(_emit(k, v))
        lines.append('')
    return '\n'.join(lines).rstrip() + '\n'


def from_dict(raw: dict) -> MachineConfig:
    cfg = MachineConfig()
    for key in ('name', 'driver', 'store_path'):
        if key in raw:
            setattr(cfg, key, str(raw[key]))
    for section in SECTIONS:
        body = raw.get(section)
        if isinstance(body, dict):
            obj = getattr(cfg, section)
            for k, v in body.items():
                if hasattr(obj, k):
                    setattr(obj, k, v)
    if 'verbosity' in raw:
        cfg.verbosity = int(raw['verbosity'])
    return cfg


def load(path: Path) -> MachineConfig:
    raw = tomllib.loads(path.read_text(encoding='utf-8'))
    return from_dict(raw)


def save(path: Path, cfg: MachineConfig) -> None:
    path.write_text(dump_toml(cfg), encoding='utf-8')
