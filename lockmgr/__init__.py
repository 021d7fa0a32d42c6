"""Shared/exclusive lock manager with deadlock detection and two-phase locking."""

__version__ = "0.1.0"
__all__ = ["logger", "rag", "lock_manager", "two_phase"]