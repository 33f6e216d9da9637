"""Drag-to-rotate orientation engine for an orthographic globe."""

__version__ = "0.1.0"
