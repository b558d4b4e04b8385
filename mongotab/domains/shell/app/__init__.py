"""Application root, tabs and startup.

Import from the submodules directly; the UI building blocks depend on
``tab_state`` and must be importable without the app.
"""
