"""Shared helpers: logging setup and the source repository abstraction."""
