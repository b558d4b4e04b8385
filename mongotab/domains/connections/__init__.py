"""Saved connections: model, store, manager and UI."""
