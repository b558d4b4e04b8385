"""UI-agnostic shared helpers."""
