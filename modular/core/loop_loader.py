"""Iteration strategy that lets a loop machine drive the loading pass."""

import logging
from typing import Any, List, Optional

from .loop_machine import LoopMachine, LoopState, StepIterator
from .module_loader import Visitor

logger = logging.getLogger(__name__)


class LoopMachineIteration:
    """
    Hands the module list to a loop machine and loads on its notifications.

    The strategy attaches itself to its machine once, when constructed. Only
    notifications from that machine in LOOP state, received while one of
    this strategy's walks is running, lead to a load attempt.
    """

    def __init__(self, loop_machine: Optional[StepIterator] = None):
        self.loop_machine = loop_machine if loop_machine is not None else LoopMachine()
        self._visit: Optional[Visitor] = None
        self.loop_machine.attach(self)

    def walk(self, modules: List[Any], visit: Visitor):
        if self._visit is not None:
            raise RuntimeError("Loop machine iteration is already walking")

        self._visit = visit
        try:
            self.loop_machine.process(modules)
        finally:
            self._visit = None

    def on_notify(self, source: Any):
        # Only the machine this strategy is bound to counts as a source
        if source is not self.loop_machine:
            return

        if source.state is not LoopState.LOOP:
            return

        if self._visit is None:
            logger.debug("Ignoring loop notification outside of a loading pass")
            return

        self._visit(source.current)

    def __repr__(self):
        return f"<LoopMachineIteration: {self.loop_machine!r}>"
