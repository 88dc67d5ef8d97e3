"""
JAX Kinspec: compiles robot kinematic trees into controller specifications.

Given a kinematic tree and the chains a controller cares about, this library
builds symbolic forward-kinematics frames, assigns input variables to the
moveable joints and derives velocity and joint-limit constraints for a
velocity-level QP controller. Expressions evaluate with JAX and can be
jit-compiled and differentiated.
"""

import jax
jax.config.update("jax_enable_x64", True)

from . import core
from . import expressions
from . import io
from . import transforms
from .config import RobotConfig, load_robot_config
from .constraints import ControllableConstraint, HardConstraint
from .robot import Robot, ScopeEntry

__version__ = "0.1.0"
__all__ = [
    "core",
    "expressions",
    "io",
    "transforms",
    "ControllableConstraint",
    "HardConstraint",
    "Robot",
    "RobotConfig",
    "ScopeEntry",
    "load_robot_config",
]
