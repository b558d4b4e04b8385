"""Shared building blocks used across domains."""
