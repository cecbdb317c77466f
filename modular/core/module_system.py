"""Module system types shared by the loader and its iteration strategies."""

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional


class LoadError(Exception):
    """Raised by a module when it cannot be loaded."""

    def __init__(self, module_id: str, message: str = ""):
        self.module_id = module_id
        super().__init__(message or f"Failed to load module {module_id}")


class Module(ABC):
    """Base class for loadable modules."""

    @abstractmethod
    def identifier(self) -> str:
        """Module identifier (not required to be unique)."""
        pass

    @abstractmethod
    def load(self):
        """
        Load the module.

        Raises:
            Exception: Any error; the loader isolates it and rejects the module
        """
        pass

    def __repr__(self):
        return f"<Module: {self.identifier()}>"


class CallbackModule(Module):
    """Module whose load operation is a plain callable."""

    def __init__(self, module_id: str, on_load: Optional[Callable[[], Any]] = None):
        """
        Initialize the module.

        Args:
            module_id: Module identifier
            on_load: Zero-argument callable invoked on load (optional)
        """
        self._id = module_id
        self._on_load = on_load

    def identifier(self) -> str:
        return self._id

    def load(self):
        if self._on_load is not None:
            self._on_load()


class RejectReason(enum.Enum):
    """Why a module was not loaded."""
    FILTERED = "filtered"
    FAILED = "failed"


@dataclass
class Rejection:
    """A module that was not loaded during a pass."""
    module: Any
    reason: RejectReason
    error: Optional[BaseException] = None

    @property
    def module_id(self) -> str:
        return self.module.identifier()


@dataclass
class LoadReport:
    """Outcome of one loading pass."""
    loaded: List[Any] = field(default_factory=list)
    rejected: List[Rejection] = field(default_factory=list)

    @property
    def loaded_ids(self) -> List[str]:
        return [m.identifier() for m in self.loaded]

    @property
    def rejected_ids(self) -> List[str]:
        return [r.module_id for r in self.rejected]

    @property
    def failed(self) -> List[Rejection]:
        """Rejections caused by a failing load operation."""
        return [r for r in self.rejected if r.reason is RejectReason.FAILED]
