"""Provisioning drivers."""

from __future__ import annotations

from .base import BaseDriver
from .cloudsigma import CloudSigmaDriver, pick_library_drive

__all__ = ['BaseDriver', 'CloudSigmaDriver', 'pick_library_drive']
