"""CLI package exports for top-level command entry points."""

from __future__ import annotations

from .main import CSMachineModalCLI, main

__all__ = ['CSMachineModalCLI', 'main']
