"""Split a shared receipt among the people who bought it."""

from .allocator import compute, round2_half_up
from .validator import validate

__version__ = "0.1.0"

__all__ = ["compute", "round2_half_up", "validate"]
