"""logo-png — the live logo service.

Polls the logo API for the current per-pixel description, renders it to
PNG, pushes every genuine change to connected websocket viewers and keeps
a timeline of past logo states in PostgreSQL.
"""

__version__ = "0.1.0"
