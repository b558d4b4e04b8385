"""Drivers, executors and the per-tab operation client."""

from .client import Client, Completion, Inbox, OperationKey, OperationKind, QueryFingerprint
from .driver import DocumentDriver, PyMongoDriver
from .executor import ManualExecutor, ThreadExecutor
from .memory import InMemoryDriver

__all__ = [
    "Client",
    "Completion",
    "DocumentDriver",
    "Inbox",
    "InMemoryDriver",
    "ManualExecutor",
    "OperationKey",
    "OperationKind",
    "PyMongoDriver",
    "QueryFingerprint",
    "ThreadExecutor",
]
