"""Top-level modal CLI wiring, argv normalization, and logging setup."""

from __future__ import annotations

import os
import sys

import scriptconfig as scfg
from loguru import logger

from ..store import load_machine, machine_exists
from ._common import log
from .machine import (
    IPCLI,
    URLCLI,
    CreateCLI,
    DriversCLI,
    FlagsCLI,
    InspectCLI,
    KillCLI,
    ListCLI,
    RemoveCLI,
    RestartCLI,
    SSHCLI,
    StartCLI,
    StatusCLI,
    StopCLI,
)


class CSMachineModalCLI(scfg.ModalCLI):
    """Provision and manage CloudSigma docker hosts."""

    create = CreateCLI
    start = StartCLI
    stop = StopCLI
    restart = RestartCLI
    kill = KillCLI
    rm = RemoveCLI
    status = StatusCLI
    ip = IPCLI
    url = URLCLI
    ssh = SSHCLI
    inspect = InspectCLI
    ls = ListCLI
    flags = FlagsCLI
    drivers = DriversCLI


def main(argv: list[str] | None = None) -> None:
    if argv is None:
        argv = sys.argv[1:]
    argv = _normalize_argv(argv)

    explicit_verbose = _count_verbose(argv)
    _setup_logging(explicit_verbose, _stored_verbosity(argv))

    try:
        rc = CSMachineModalCLI.main(argv=argv, _noexit=True)
    except Exception as ex:
        print(f'ERROR: {ex}', file=sys.stderr)
        log.debug('Unhandled csmachine error: {!r}', ex)
        sys.exit(2)

    if any(flag in argv for flag in ('-h', '--help')):
        sys.exit(0)
    if isinstance(rc, int):
        sys.exit(rc)
    sys.exit(0)


def _stored_verbosity(argv: list[str]) -> int:
    """Verbosity recorded on the machine named in ``argv``, else 1."""
    if len(argv) < 2 or argv[1].startswith('-'):
        return 1
    storage = None
    if '--storage' in argv:
        idx = argv.index('--storage')
        if idx + 1 < len(argv):
            storage = argv[idx + 1]
    try:
        if machine_exists(argv[1], storage):
            return load_machine(argv[1], storage).verbosity
    except (OSError, ValueError):
        pass
    return 1


def _setup_logging(args_verbose: int, cfg_verbosity: int) -> None:
    logger.remove()
    effective_verbosity = args_verbose if args_verbose > 0 else cfg_verbosity
    level = 'WARNING'
    if effective_verbosity == 1:
        level = 'INFO'
    elif effective_verbosity >= 2:
        level = 'DEBUG'
    colorize = sys.stderr.isatty() and os.getenv('NO_COLOR') is None
    logger.add(
        sys.stderr,
        level=level,
        colorize=colorize,
        format='<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>',
    )
    log.debug(
        'Logging configured at {} (effective_verbosity={}, colorize={})',
        level,
        effective_verbosity,
        colorize,
    )


def _normalize_argv(argv: list[str]) -> list[str]:
    """Map docker-machine style spellings onto scriptconfig command names."""
    aliases = {'remove': 'rm', 'list': 'ls', 'state': 'status'}
    if argv and argv[0] in aliases:
        return [aliases[argv[0]], *argv[1:]]
    return argv


def _count_verbose(argv: list[str]) -> int:
    count = 0
    for item in argv:
        if item == '--verbose':
            count += 1
        elif item.startswith('-') and not item.startswith('--'):
            short = item[1:]
            if short and set(short) <= {'v'}:
                count += len(short)
    return count
