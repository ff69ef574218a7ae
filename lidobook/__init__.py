"""lidobook: tenant-scoped booking engine for beach clubs."""

__version__ = "1.0.0"
