"""Core module loading functionality."""

from .module_system import (
    CallbackModule,
    LoadError,
    LoadReport,
    Module,
    RejectReason,
    Rejection,
)
from .module_loader import DirectIteration, LoaderHooks, ModuleLoader
from .loop_machine import LoopMachine, LoopState, Observer, StepIterator
from .loop_loader import LoopMachineIteration

__all__ = [
    "Module", "CallbackModule", "LoadError", "RejectReason", "Rejection", "LoadReport",
    "ModuleLoader", "LoaderHooks", "DirectIteration",
    "LoopMachine", "LoopState", "Observer", "StepIterator", "LoopMachineIteration",
]
