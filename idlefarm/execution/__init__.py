"""Turning decided actions into state changes."""

from idlefarm.execution.executor import ActionExecutor, ExecutionReport

__all__ = ["ActionExecutor", "ExecutionReport"]
