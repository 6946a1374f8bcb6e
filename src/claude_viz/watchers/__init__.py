"""Watchers for the Claude Code plans and todos directories."""

from .plans import PlanWatcher
from .todos import TodoWatcher

__all__ = ["PlanWatcher", "TodoWatcher"]
