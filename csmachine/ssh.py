"""SSH key generation and ssh command argument helpers."""

from __future__ import annotations

from pathlib import Path
from shutil import which

from loguru import logger

from .errors import CSMachineError, MissingSSHKeyError
from .util import ensure_dir, run_cmd

log = logger


def generate_ssh_key(path: str | Path, *, comment: str = '') -> Path:
    """Create an RSA key pair at ``path`` and ``path.pub``.

    Existing key files are replaced.
    """
    if which('ssh-keygen') is None:
        raise CSMachineError('ssh-keygen not found on PATH; install OpenSSH')
    path = Path(path)
    ensure_dir(path.parent)
    for p in (path, Path(str(path) + '.pub')):
        if p.exists():
            p.unlink()
    log.debug('Generating SSH key at {}', path)
    run_cmd(
        [
            'ssh-keygen',
            '-t',
            'rsa',
            '-b',
            '2048',
            '-N',
            '',
            '-C',
            comment,
            '-f',
            str(path),
            '-q',
        ],
        check=True,
        capture=True,
    )
    path.chmod(0o600)
    return path


def read_public_key(path: str | Path) -> str:
    pub = Path(str(path) + '.pub')
    if not pub.exists():
        raise MissingSSHKeyError(f'SSH public key not found: {pub}')
    return pub.read_text(encoding='utf-8').rstrip('\r\n')


def require_ssh_key(path: str) -> str:
    ident = (path or '').strip()
    if not ident or not Path(ident).exists():
        raise MissingSSHKeyError(
            f'SSH key {ident or "(unset)"} does not exist; was the machine created?'
        )
    return ident


def ssh_base_args(
    ident: str,
    *,
    port: int = 22,
    strict_host_key_checking: str = 'no',
    connect_timeout: int | None = None,
    batch_mode: bool = False,
) -> list[str]:
    args: list[str] = []
    if batch_mode:
        args.extend(['-o', 'BatchMode=yes'])
    if connect_timeout is not None:
        args.extend(['-o', f'ConnectTimeout={connect_timeout}'])
    args.extend(['-o', f'StrictHostKeyChecking={strict_host_key_checking}'])
    args.extend(['-o', 'UserKnownHostsFile=/dev/null', '-o', 'LogLevel=quiet'])
    args.extend(['-p', str(port), '-i', ident])
    return args
