"""API route handlers."""
from . import simplefin

__all__ = ["simplefin"]
