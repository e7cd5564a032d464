"""Pytest configuration and fixtures for idle-farm tests."""

import random

import pytest

from idlefarm.config.parameters import compile_config
from idlefarm.data.defaults import create_default_provider
from idlefarm.events.domain_events import GameEvent
from idlefarm.events.event_bus import EventBus
from idlefarm.execution.executor import ActionExecutor
from idlefarm.processes.base import ProcessContext
from idlefarm.processes.manager import ProcessManager
from idlefarm.simulation.engine import create_engine
from idlefarm.state.model import create_initial_state
from idlefarm.state.store import StateStore


@pytest.fixture
def seeded_rng():
    """Provide a deterministic RNG for tests."""
    return random.Random(42)


@pytest.fixture
def config():
    """Casual persona with a fixed seed."""
    return compile_config("casual", seed=42)


@pytest.fixture
def params(config):
    return config.parameters


@pytest.fixture
def data_provider():
    """The built-in balance tables."""
    return create_default_provider()


@pytest.fixture
def state(config):
    """A fresh starting state: day 1, 08:00, 3 plots, 75 gold, 3 energy."""
    return create_initial_state(config)


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def game_events(event_bus):
    """Every GameEvent published on the shared bus, in order."""
    received = []
    event_bus.subscribe(GameEvent, received.append)
    return received


@pytest.fixture
def store(state, event_bus):
    return StateStore(state, event_bus)


@pytest.fixture
def process_context(store, data_provider, config, seeded_rng):
    return ProcessContext(store, data_provider, config.parameters, config.persona, seeded_rng)


@pytest.fixture
def process_manager(process_context, event_bus):
    return ProcessManager(process_context, event_bus)


@pytest.fixture
def executor(store, process_manager, data_provider, config, event_bus, seeded_rng):
    return ActionExecutor(
        store, process_manager, data_provider, config.parameters, event_bus, seeded_rng
    )


@pytest.fixture
def engine(config):
    """Setup a simulation engine for testing with deterministic seed."""
    return create_engine(config)
