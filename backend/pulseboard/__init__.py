"""Pulseboard: kanban task board and team pulse service."""

__version__ = "0.1.0"
