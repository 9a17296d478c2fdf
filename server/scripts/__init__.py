"""Offline maintenance scripts (run with python -m server.scripts.<name>)."""
