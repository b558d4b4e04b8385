"""UI-agnostic core: signals, queue, components and focus."""

from .component import Area, Component, Line, Region
from .focus import ROOT, FocusManager, FocusPath
from .queue import SignalQueue
from .signals import Command, Event, Message, Signal, Significance, classify

__all__ = [
    "Area",
    "Command",
    "Component",
    "Event",
    "FocusManager",
    "FocusPath",
    "Line",
    "Message",
    "ROOT",
    "Region",
    "Signal",
    "SignalQueue",
    "Significance",
    "classify",
]
