"""Tests for loading driven by a loop machine."""

import pytest
from unittest.mock import Mock, call

from modular.config import prefix_filter
from modular.core import (
    LoaderHooks,
    LoopMachine,
    LoopMachineIteration,
    LoopState,
    ModuleLoader,
    RejectReason,
)


@pytest.fixture
def machine():
    return LoopMachine()


@pytest.fixture
def loop_loader(machine):
    def factory(**hooks):
        return ModuleLoader(LoaderHooks(**hooks), LoopMachineIteration(machine), report_failures=False)
    return factory


class ScriptedMachine:
    """Step iterator that replays a fixed list of (state, current) notifications."""

    def __init__(self, script, sources=()):
        self.script = script
        self.sources = list(sources)
        self.observers = []
        self.state = LoopState.IDLE
        self.current = None

    def attach(self, observer):
        self.observers.append(observer)

    def process(self, sequence):
        for source in self.sources:
            for observer in self.observers:
                observer.on_notify(source)
        for state, current in self.script:
            self.state, self.current = state, current
            for observer in self.observers:
                observer.on_notify(self)


class TestLoopMachineIteration:
    """Test the observer-driven iteration strategy."""

    def test_attaches_once_on_construction(self, machine):
        """Test that the strategy registers itself with its machine."""
        iteration = LoopMachineIteration(machine)

        assert machine.observers == [iteration]

    def test_creates_machine_when_missing(self):
        """Test that a machine is created when none is given."""
        iteration = LoopMachineIteration()

        assert isinstance(iteration.loop_machine, LoopMachine)
        assert iteration.loop_machine.observers == [iteration]

    def test_load_in_order(self, loop_loader, modules, loaded):
        """Test that the machine drives loading in sequence order."""
        report = loop_loader().load(modules)

        assert loaded == ["test-1", "num-two", "test-3"]
        assert report.loaded_ids == ["test-1", "num-two", "test-3"]

    def test_load_with_condition(self, loop_loader, modules, loaded):
        """Test that filtering applies to machine-driven loading."""
        unloaded = []
        loader = loop_loader(
            can_load_module=prefix_filter("test-"),
            handle_unloaded_module=lambda m: unloaded.append(m.identifier()),
        )

        loader.load(modules)

        assert loaded == ["test-1", "test-3"]
        assert unloaded == ["num-two"]

    def test_load_with_preparation(self, loop_loader, make_module, loaded):
        """Test that prepared lists are handed to the machine."""
        loader = loop_loader(prepare_module_list=lambda ms: ms + [make_module("new")])

        loader.load([make_module("test-1"), make_module("test-2"), make_module("test-3")])

        assert loaded == ["test-1", "test-2", "test-3", "new"]

    def test_failure_does_not_interrupt_machine(self, loop_loader, make_module, loaded, machine):
        """Test that a failing module does not stop later notifications."""
        report = loop_loader().load([
            make_module("a"),
            make_module("b", fail=True),
            make_module("c"),
        ])

        assert loaded == ["a", "c"]
        assert report.failed[0].reason is RejectReason.FAILED
        assert machine.state is LoopState.FINISHED

    def test_loads_current_element_only_in_loop_state(self):
        """Test that only LOOP notifications trigger a visit, with the current element."""
        machine = ScriptedMachine([
            (LoopState.IDLE, None),
            (LoopState.LOOP, "first"),
            (LoopState.FINISHED, None),
            (LoopState.IDLE, None),
            (LoopState.LOOP, "second"),
        ])
        iteration = LoopMachineIteration(machine)
        visit = Mock()

        iteration.walk(["ignored"], visit)

        assert visit.call_args_list == [call("first"), call("second")]

    def test_ignores_foreign_sources(self):
        """Test that notifications from unknown sources are ignored."""
        foreign = ScriptedMachine([])
        foreign.state, foreign.current = LoopState.LOOP, "other"
        machine = ScriptedMachine([(LoopState.LOOP, "own")], sources=[object(), foreign])
        iteration = LoopMachineIteration(machine)
        visit = Mock()

        iteration.walk([], visit)

        visit.assert_called_once_with("own")

    def test_nested_walk_refused(self, machine):
        """Test that a second walk during a walk raises and keeps the outer visitor."""
        iteration = LoopMachineIteration(machine)
        seen = []
        errors = []

        def visit(element):
            seen.append(element)
            if element == "a":
                try:
                    iteration.walk(["nested"], seen.append)
                except RuntimeError as e:
                    errors.append(str(e))

        iteration.walk(["a", "b"], visit)

        assert seen == ["a", "b"]
        assert errors == ["Loop machine iteration is already walking"]

    def test_ignores_walks_it_did_not_start(self, machine, loop_loader, make_module, loaded):
        """Test that driving the machine directly does not load anything."""
        loop_loader()

        machine.process([make_module("stray")])

        assert loaded == []

    def test_stays_attached_across_passes(self, loop_loader, make_module, loaded, machine):
        """Test that one strategy serves several passes without re-attaching."""
        loader = loop_loader()

        loader.load([make_module("a")])
        loader.load([make_module("b")])

        assert loaded == ["a", "b"]
        assert len(machine.observers) == 1

    def test_shared_machine_with_other_observers(self, loop_loader, modules, machine):
        """Test that other observers see the same walk."""
        other = Mock()
        machine.attach(other)

        loop_loader().load(modules)

        assert other.on_notify.call_count == len(modules) + 2
