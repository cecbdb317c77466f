"""Module loader: prepares, filters and loads modules, isolating per-module failures."""

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional

from .module_system import LoadReport, RejectReason, Rejection

logger = logging.getLogger(__name__)

Visitor = Callable[[Any], None]


def _identity(modules: List[Any]) -> List[Any]:
    return modules


def _always(module: Any) -> bool:
    return True


def _ignore(module: Any, rejection: Rejection):
    pass


def _accepts_rejection(func: Callable) -> bool:
    """Whether a rejection hook takes the rejection record as second argument."""
    try:
        params = inspect.signature(func).parameters.values()
    except (TypeError, ValueError):
        return True

    positional = 0
    for param in params:
        if param.kind is param.VAR_POSITIONAL:
            return True
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            positional += 1
    return positional >= 2


@dataclass
class LoaderHooks:
    """
    Customization points of a loading pass.

    Attributes:
        prepare_module_list: Transforms the module list before iteration
        can_load_module: Decides whether a module should be loaded
        handle_unloaded_module: Called once per rejected module, with
            ``(module)`` or ``(module, rejection)``
    """
    prepare_module_list: Callable[[List[Any]], Iterable[Any]] = _identity
    can_load_module: Callable[[Any], bool] = _always
    handle_unloaded_module: Callable[..., Any] = _ignore

    def reject(self, rejection: Rejection):
        # Checked per call since the hook may be reassigned
        if _accepts_rejection(self.handle_unloaded_module):
            self.handle_unloaded_module(rejection.module, rejection)
        else:
            self.handle_unloaded_module(rejection.module)


class DirectIteration:
    """Walks the module list in order, visiting each module synchronously."""

    def walk(self, modules: List[Any], visit: Visitor):
        for module in modules:
            visit(module)


class ModuleLoader:
    """Runs loading passes over ordered module sequences."""

    def __init__(self, hooks: Optional[LoaderHooks] = None, iteration=None,
                 report_failures: bool = True):
        """
        Initialize the module loader.

        Args:
            hooks: Customization hooks (defaults: identity, always, no-op)
            iteration: Iteration strategy exposing ``walk(modules, visit)``
            report_failures: Log load failures at ERROR with traceback
        """
        self.hooks = hooks or LoaderHooks()
        self.iteration = iteration or DirectIteration()
        self.report_failures = report_failures
        self._report: Optional[LoadReport] = None

    def load(self, modules: Iterable[Any]) -> LoadReport:
        """
        Run one loading pass.

        Args:
            modules: Ordered modules to load

        Returns:
            Report of loaded and rejected modules

        Raises:
            Exception: Whatever the preparation hook raises; the pass is aborted
            TypeError: If the preparation hook does not return an iterable
            RuntimeError: If called while a pass of this loader is running
        """
        if self._report is not None:
            raise RuntimeError("Module loader is already running a loading pass")

        prepared = self.hooks.prepare_module_list(list(modules))
        try:
            prepared = list(prepared)
        except TypeError as e:
            raise TypeError(
                f"prepare_module_list must return an iterable of modules, "
                f"got {type(prepared).__name__}"
            ) from e

        report = LoadReport()
        self._report = report
        try:
            self.iteration.walk(prepared, self.attempt_load)
        finally:
            self._report = None

        logger.info(
            f"Module loading complete: {len(report.loaded)} loaded, "
            f"{len(report.rejected)} rejected"
        )
        return report

    def attempt_load(self, module: Any) -> bool:
        """
        Filter and load a single module.

        Args:
            module: Module to attempt

        Returns:
            True if the module loaded
        """
        module_id = module.identifier()

        if not self.hooks.can_load_module(module):
            logger.debug(f"Skipping filtered module: {module_id}")
            self._reject(Rejection(module, RejectReason.FILTERED))
            return False

        try:
            module.load()
        except Exception as e:
            if self.report_failures:
                logger.error(f"Failed to load module {module_id}: {e}", exc_info=True)
            else:
                logger.debug(f"Failed to load module {module_id}: {e}")
            self._reject(Rejection(module, RejectReason.FAILED, error=e))
            return False

        logger.debug(f"Loaded module: {module_id}")
        if self._report is not None:
            self._report.loaded.append(module)
        return True

    def _reject(self, rejection: Rejection):
        if self._report is not None:
            self._report.rejected.append(rejection)
        self.hooks.reject(rejection)
