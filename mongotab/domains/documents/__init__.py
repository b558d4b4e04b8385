"""Browsing, querying and editing documents."""
