"""Monthly pull-request statistics from GitHub or a local log."""

__version__ = "0.1.0"
