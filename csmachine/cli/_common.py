from __future__ import annotations

import sys

import scriptconfig as scfg
from loguru import logger

from ..driver import BaseDriver
from ..flags import CLOUDSIGMA_FLAGS
from ..plugin import get_driver
from ..store import load_machine, save_machine

log = logger

_USAGE = {f.attr: f.usage for f in CLOUDSIGMA_FLAGS}


class _BaseCommand(scfg.DataConfig):
    """Base options shared by all commands."""

    storage = scfg.Value(
        None,
        help='Machine store root (default: $CSMACHINE_STORAGE_PATH or the user data dir).',
    )
    verbose = scfg.Value(
        0,
        short_alias=['v'],
        isflag='counter',
        help='Increase verbosity (-v, -vv).',
    )


class _MachineCommand(_BaseCommand):
    """Base for commands acting on one stored machine."""

    machine = scfg.Value('default', position=1, help='Machine name.')


def _usage(attr: str) -> str:
    return _USAGE.get(attr, '')


def _load_driver(machine: str, storage: str | None) -> BaseDriver:
    cfg = load_machine(machine, storage)
    log.debug('Loaded machine {} (driver={})', cfg.name, cfg.driver)
    return get_driver(cfg.driver, cfg=cfg)


def _save_driver(driver: BaseDriver, storage: str | None) -> None:
    fpath = save_machine(driver.cfg, storage)
    log.debug('Saved machine {} to {}', driver.machine_name, fpath)


def _confirm(*, yes: bool, purpose: str) -> None:
    if yes:
        return
    if not sys.stdin.isatty():
        raise RuntimeError(
            'This operation requires confirmation, but stdin is not interactive. '
            'Re-run with --yes.'
        )
    print(purpose)
    ans = input('Continue? [y/N]: ').strip().lower()
    if ans not in {'y', 'yes'}:
        raise RuntimeError('Aborted by user.')
