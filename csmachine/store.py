"""On-disk machine store: one directory per machine holding its config and SSH key."""

from __future__ import annotations

import os
import shutil
from pathlib import Path

import ubelt as ub

from .config import MachineConfig, load, save
from .errors import MachineNotFoundError

STORAGE_ENV = 'CSMACHINE_STORAGE_PATH'
CONFIG_NAME = 'config.toml'


def _appdir(appname: str, kind: str) -> Path:
    p = ub.Path.appdir(appname, type=kind).ensuredir()
    return Path(p)


def storage_root(root: str | Path | None = None) -> Path:
    """Resolve the store root: explicit value, then env var, then app data dir."""
    if root:
        return Path(root).expanduser()
    env = os.environ.get(STORAGE_ENV, '').strip()
    if env:
        return Path(env).expanduser()
    return _appdir('csmachine', 'data')


def machines_dir(root: str | Path | None = None) -> Path:
    return storage_root(root) / 'machines'


def machine_dir(name: str, root: str | Path | None = None) -> Path:
    name = (name or '').strip()
    if not name or '/' in name or name in {'.', '..'}:
        raise ValueError(f'invalid machine name: {name!r}')
    return machines_dir(root) / name


def machine_exists(name: str, root: str | Path | None = None) -> bool:
    return (machine_dir(name, root) / CONFIG_NAME).exists()


def list_machines(root: str | Path | None = None) -> list[str]:
    mdir = machines_dir(root)
    if not mdir.exists():
        return []
    return sorted(
        p.name for p in mdir.iterdir() if (p / CONFIG_NAME).exists()
    )


def load_machine(name: str, root: str | Path | None = None) -> MachineConfig:
    fpath = machine_dir(name, root) / CONFIG_NAME
    if not fpath.exists():
        raise MachineNotFoundError(f'Machine not found: {name} ({fpath})')
    cfg = load(fpath).expanded_paths()
    cfg.name = name
    if not cfg.store_path:
        cfg.store_path = str(fpath.parent)
    return cfg


def save_machine(cfg: MachineConfig, root: str | Path | None = None) -> Path:
    mdir = machine_dir(cfg.name, root)
    mdir.mkdir(parents=True, exist_ok=True)
    fpath = mdir / CONFIG_NAME
    # The config holds the API password; restrict it before writing.
    fpath.touch(mode=0o600, exist_ok=True)
    fpath.chmod(0o600)
    save(fpath, cfg)
    return fpath


def remove_machine(name: str, root: str | Path | None = None) -> bool:
    mdir = machine_dir(name, root)
    if not mdir.exists():
        return False
    shutil.rmtree(mdir)
    return True
