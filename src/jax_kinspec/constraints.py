"""Controllable and hard joint constraints.

Controllable constraints are soft, weighted bounds on a joint's velocity.
Hard constraints bound the remaining distance of a joint to its position
limits, ``limit - q``, so they plug directly into a velocity- or delta-level
solver.
"""

from dataclasses import dataclass
from typing import Mapping, Optional

from .core.tree import BOUNDED_JOINT_TYPES, Joint
from .exceptions import (
    InvalidConfigurationError,
    MissingConfigurationError,
    SafetyViolationError,
    StructuralIntegrityError,
)
from .expressions import DoubleConst, DoubleExpression, DoubleInput, DoubleSub

DEFAULT_JOINT_WEIGHT_KEY = "default_joint_weight"
DEFAULT_JOINT_VELOCITY_KEY = "default_joint_velocity"


@dataclass(frozen=True)
class ControllableConstraint:
    """Weighted velocity bounds of one moveable joint.

    Attributes:
        name: Joint name.
        input_number: Input index of the joint, i.e. its control-vector slot.
        weight: Weight expression of the joint in the solver's cost.
        lower: Lower velocity bound expression.
        upper: Upper velocity bound expression.
    """
    name: str
    input_number: int
    weight: DoubleExpression
    lower: DoubleExpression
    upper: DoubleExpression


@dataclass(frozen=True)
class HardConstraint:
    """Position limits of a joint, relative to the joint's current value.

    Attributes:
        name: Joint name.
        expression: Current joint value expression.
        lower: ``lower_limit - expression``.
        upper: ``upper_limit - expression``.
    """
    name: str
    expression: DoubleExpression
    lower: DoubleExpression
    upper: DoubleExpression


def resolve_weight(joint_name: str, weights: Mapping[str, float]) -> float:
    """Explicit joint weight, else the default weight."""
    if joint_name in weights:
        weight = weights[joint_name]
    elif DEFAULT_JOINT_WEIGHT_KEY in weights:
        weight = weights[DEFAULT_JOINT_WEIGHT_KEY]
    else:
        raise MissingConfigurationError(f"Could not find weight for joint '{joint_name}'.")

    if not weight >= 0:
        raise InvalidConfigurationError(
            f"Came up with a joint weight below zero for joint '{joint_name}': {weight}"
        )
    return float(weight)


def resolve_velocity_limit(joint: Joint, thresholds: Mapping[str, float]) -> float:
    """Velocity limit of ``joint``; configured thresholds may only tighten the physical one.

    Args:
        joint: Joint with physical limits.
        thresholds: Per-joint velocity thresholds, optionally with the
            ``default_joint_velocity`` key.

    Returns:
        The explicit threshold, else the default threshold, else the
        physical velocity limit.
    """
    if joint.limits is None:
        raise StructuralIntegrityError(f"Joint with name '{joint.name}' has no limits.")

    physical_limit = joint.limits.velocity
    if joint.name in thresholds:
        limit = thresholds[joint.name]
    elif DEFAULT_JOINT_VELOCITY_KEY in thresholds:
        limit = thresholds[DEFAULT_JOINT_VELOCITY_KEY]
    else:
        limit = physical_limit

    if not limit <= physical_limit:
        raise SafetyViolationError(joint.name, limit, physical_limit)
    return float(limit)


def controllable_constraint(
    joint: Joint,
    variable: DoubleInput,
    weights: Mapping[str, float],
    thresholds: Mapping[str, float],
) -> ControllableConstraint:
    weight = resolve_weight(joint.name, weights)
    limit = resolve_velocity_limit(joint, thresholds)
    return ControllableConstraint(
        name=joint.name,
        input_number=variable.index,
        weight=DoubleConst(weight),
        lower=DoubleConst(-limit),
        upper=DoubleConst(limit),
    )


def hard_constraint(joint: Joint, variable: DoubleInput) -> Optional[HardConstraint]:
    """Position-limit constraint for revolute and prismatic joints, None otherwise."""
    if joint.type not in BOUNDED_JOINT_TYPES:
        return None
    if joint.limits is None:
        raise StructuralIntegrityError(f"Joint with name '{joint.name}' has no limits.")

    return HardConstraint(
        name=joint.name,
        expression=variable,
        lower=DoubleSub((DoubleConst(joint.limits.lower), variable)),
        upper=DoubleSub((DoubleConst(joint.limits.upper), variable)),
    )
