"""Forward kinematics expressions for kinematic chains.

Every joint contributes its fixed origin frame followed by a motion frame
parameterized by the joint's input variable. The chain's frame is the
left-to-right product of those frames, wrapped in a CachedFrame so that all
consumers of one chain share a single evaluation per pass.
"""

from typing import Dict, List, Mapping, Sequence

from .chain import ChainKey
from .core.tree import CONTINUOUS, FIXED, FLOATING, PLANAR, PRISMATIC, REVOLUTE, UNKNOWN, Joint, KinematicTree, Pose
from .exceptions import NotFoundError, UnsupportedJointTypeError
from .expressions import (
    AxisAngle,
    CachedFrame,
    FrameConstructor,
    FrameExpression,
    FrameMultiplication,
    QuaternionConst,
    VectorConstructor,
    VectorDoubleMul,
)
from .registry import JointVariableRegistry


def pose_frame(pose: Pose) -> FrameConstructor:
    """Constant frame expression of a fixed pose."""
    w, x, y, z = pose.rotation
    return FrameConstructor(
        translation=VectorConstructor.from_values(pose.position),
        rotation=QuaternionConst(w=w, x=x, y=y, z=z),
    )


def joint_transforms(joint: Joint, registry: JointVariableRegistry) -> List[FrameExpression]:
    """Frame expressions contributed by ``joint``, in application order.

    Args:
        joint: Joint to translate.
        registry: Registry holding the input variable of every moveable joint.

    Returns:
        The origin frame, followed by the motion frame for moveable joints.
    """
    frames: List[FrameExpression] = [pose_frame(joint.origin)]

    if joint.type == FIXED:
        pass  # no motion frame
    elif joint.type == PRISMATIC:
        frames.append(FrameConstructor(
            translation=VectorDoubleMul(VectorConstructor.from_values(joint.axis), registry.lookup(joint.name))
        ))
    elif joint.type in (REVOLUTE, CONTINUOUS):
        frames.append(FrameConstructor(
            translation=VectorConstructor(),
            rotation=AxisAngle(VectorConstructor.from_values(joint.axis), registry.lookup(joint.name)),
        ))
    elif joint.type in (PLANAR, FLOATING, UNKNOWN):
        raise UnsupportedJointTypeError(joint.name, joint.type)
    else:
        raise UnsupportedJointTypeError(joint.name, joint.type, modeled=False)

    return frames


def build_chain_frame(
    tree: KinematicTree, joint_names: Sequence[str], registry: JointVariableRegistry
) -> CachedFrame:
    """Cached frame expression of the root-to-tip transform of a chain.

    Args:
        tree: Kinematic tree the joints belong to.
        joint_names: All joints of the chain, fixed ones included, root to tip.
        registry: Registry that already holds every moveable joint of the chain.
    """
    frames: List[FrameExpression] = [FrameConstructor()]
    for joint_name in joint_names:
        frames.extend(joint_transforms(tree.joint(joint_name), registry))
    return CachedFrame(FrameMultiplication(tuple(frames)))


class ForwardKinematicsCache:
    """Chain key to cached frame expression, built at most once per key."""

    def __init__(self):
        self._frames: Dict[ChainKey, CachedFrame] = {}

    def get_or_build(
        self,
        tree: KinematicTree,
        key: ChainKey,
        joint_names: Sequence[str],
        registry: JointVariableRegistry,
    ) -> CachedFrame:
        if key not in self._frames:
            self._frames[key] = build_chain_frame(tree, joint_names, registry)
        return self._frames[key]

    def get(self, key: ChainKey) -> CachedFrame:
        if key not in self._frames:
            raise NotFoundError(
                f"Could not find forward kinematics for chain ('{key[0]}', '{key[1]}')."
            )
        return self._frames[key]

    def __contains__(self, key: ChainKey) -> bool:
        return key in self._frames

    def as_mapping(self) -> Mapping[ChainKey, CachedFrame]:
        return dict(self._frames)
