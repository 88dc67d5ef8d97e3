"""Core data structures for jax_kinspec.

This module provides the immutable kinematic tree the specification compiler
reads from.
"""

from .tree import (
    BOUNDED_JOINT_TYPES,
    CONTINUOUS,
    FIXED,
    FLOATING,
    JOINT_TYPES,
    PLANAR,
    PRISMATIC,
    REVOLUTE,
    UNKNOWN,
    Joint,
    JointLimits,
    KinematicTree,
    Link,
    Pose,
)

__all__ = [
    "Joint",
    "JointLimits",
    "KinematicTree",
    "Link",
    "Pose",
    "FIXED",
    "PRISMATIC",
    "REVOLUTE",
    "CONTINUOUS",
    "PLANAR",
    "FLOATING",
    "UNKNOWN",
    "JOINT_TYPES",
    "BOUNDED_JOINT_TYPES",
]
