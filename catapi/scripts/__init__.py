"""Command-line maintenance scripts (python -m catapi.scripts.<name>)."""
