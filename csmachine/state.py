"""Machine lifecycle states reported by drivers."""

from __future__ import annotations

import enum


class State(enum.Enum):
    NONE = ''
    RUNNING = 'Running'
    PAUSED = 'Paused'
    SAVED = 'Saved'
    STOPPED = 'Stopped'
    STOPPING = 'Stopping'
    STARTING = 'Starting'
    ERROR = 'Error'
    TIMEOUT = 'Timeout'

    def __str__(self) -> str:
        return self.value


_SERVER_STATUS = {
    'paused': State.PAUSED,
    'running': State.RUNNING,
    'starting': State.STARTING,
    'stopped': State.STOPPED,
    'stopping': State.STOPPING,
}


def from_server_status(status: str) -> State:
    """Map a CloudSigma server ``status`` string onto a :class:`State`."""
    return _SERVER_STATUS.get((status or '').strip().lower(), State.NONE)
