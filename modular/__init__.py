"""Pluggable module loading with isolated failures."""

import logging

from .core import (
    CallbackModule,
    DirectIteration,
    LoadError,
    LoaderHooks,
    LoadReport,
    LoopMachine,
    LoopMachineIteration,
    LoopState,
    Module,
    ModuleLoader,
    RejectReason,
    Rejection,
)
from .config import LoaderSettings, ModuleConfigError, build_loader, load_config, prefix_filter

__version__ = "0.1.0"


def setup_logging(level: str = "INFO"):
    """Configure root logging for scripts using the loader."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


__all__ = [
    "Module", "CallbackModule", "LoadError", "RejectReason", "Rejection", "LoadReport",
    "ModuleLoader", "LoaderHooks", "DirectIteration",
    "LoopMachine", "LoopState", "LoopMachineIteration",
    "LoaderSettings", "ModuleConfigError", "build_loader", "load_config", "prefix_filter",
    "setup_logging",
]
