"""crtfile: create files with explicit permission bits."""

__version__ = "0.3.1"
