"""
routewire CLI.

Usage:
    routewire routes myapp.main:server
    routewire serve myapp.main:server --port 8080
"""

from .. import __version__

__cli_name__ = "routewire"

__all__ = ["__version__", "__cli_name__"]
