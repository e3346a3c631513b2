"""
autoshadow command line interface.
"""

from autoshadow import __version__

__all__ = ["__version__"]
