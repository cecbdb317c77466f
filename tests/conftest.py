"""Shared test fixtures for the module loader test suite."""

import pytest

from modular.core import CallbackModule, LoadError


@pytest.fixture
def loaded():
    """List that records identifiers of modules as they load."""
    return []


@pytest.fixture
def make_module(loaded):
    """Factory for modules that record themselves in ``loaded`` when loaded."""
    def factory(module_id, fail=False):
        def on_load():
            if fail:
                raise LoadError(module_id, f"{module_id} is broken")
            loaded.append(module_id)

        return CallbackModule(module_id, on_load)

    return factory


@pytest.fixture
def modules(make_module):
    """Three modules, the middle one without the test- prefix."""
    return [make_module("test-1"), make_module("num-two"), make_module("test-3")]
