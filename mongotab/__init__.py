"""mongotab - a multi-tab terminal browser for document databases."""

__version__ = "0.1.0"
