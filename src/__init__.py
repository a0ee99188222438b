# src/__init__.py — v1
"""archinfer — architecture inference from call and import graphs."""

from archinfer.version import __version__

__all__ = ["__version__"]
