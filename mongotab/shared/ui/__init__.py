"""Reusable UI components built on the core component capability."""
