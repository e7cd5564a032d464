"""idlefarm exception hierarchy.

Exceptions are reserved for genuinely unexpected states (corrupted lookup
tables, impossible enum values, misuse of the transaction API). Routine
outcomes such as "not enough gold" are reported through ``idlefarm.result``.
"""


class IdleFarmError(Exception):
    """Root of all idlefarm domain exceptions."""


class SimulationError(IdleFarmError):
    """Errors during simulation execution (engine, systems, processes)."""


class StateError(SimulationError):
    """The simulation state was used in an invalid way."""


class TransactionError(StateError):
    """Unknown, out-of-order or already-closed transaction."""


class ProcessError(SimulationError):
    """A process handler was asked to do something impossible."""


class CombatError(SimulationError):
    """Invalid combat input (unknown route, boss or weapon family)."""


class DataError(IdleFarmError):
    """Static balance data is missing or malformed."""


class ConfigurationError(IdleFarmError):
    """Invalid or missing configuration."""
