"""
JAX rotation and rigid-body frame helpers.

These back the numeric evaluation of symbolic expressions:
- SO(3) rotations (so3 module)
- SE(3) rigid body frames (se3 module)

All functions are pure, stateless, and JIT-compilable.
"""

from . import so3
from . import se3

__all__ = [
    "so3",
    "se3",
]
