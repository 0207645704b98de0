"""Declaration model, checker and generation helpers for repository packages."""

__version__ = "0.1.0"