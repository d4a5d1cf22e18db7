"""School management backend: read-through caching layer."""

__version__ = "0.1.0"
