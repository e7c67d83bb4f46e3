"""
Space Backup - Mirror every project repository of a Space organization to disk.

This package walks the projects and repositories exposed by the Space HTTP API
and keeps a local clone of each one, cloning on the first run and pulling on
every run after that.
"""

__version__ = "1.0.0"
