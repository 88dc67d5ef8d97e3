"""Read-only kinematic tree description.

This module defines the immutable structural model the specification
compiler walks: links, joints, their types, axes, origin poses and limits.
Instances are built once (usually by the URDF loader) and only ever queried
afterwards.
"""

from collections import deque
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from flax import struct

from jax_kinspec.exceptions import StructuralIntegrityError

FIXED = "fixed"
PRISMATIC = "prismatic"
REVOLUTE = "revolute"
CONTINUOUS = "continuous"
PLANAR = "planar"
FLOATING = "floating"
UNKNOWN = "unknown"

JOINT_TYPES = frozenset({FIXED, PRISMATIC, REVOLUTE, CONTINUOUS, PLANAR, FLOATING, UNKNOWN})
BOUNDED_JOINT_TYPES = frozenset({REVOLUTE, PRISMATIC})


@struct.dataclass
class Pose:
    """Rigid transform from a parent frame to a joint frame.

    Attributes:
        position: Translation (x, y, z).
        rotation: Unit quaternion in (w, x, y, z) order.
    """
    position: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    rotation: Tuple[float, float, float, float] = (1.0, 0.0, 0.0, 0.0)


@struct.dataclass
class JointLimits:
    """Physical motion limits of a joint."""
    lower: float = 0.0
    upper: float = 0.0
    velocity: float = 0.0
    effort: float = 0.0


@struct.dataclass
class Joint:
    """A joint connecting a parent link to a child link.

    Attributes:
        name: Unique joint name. Static field.
        type: One of the URDF joint types (``fixed``, ``revolute``, ...).
        parent_link: Name of the parent link.
        child_link: Name of the child link.
        origin: Fixed transform from the parent link frame to the joint frame.
        axis: Joint axis expressed in the joint frame.
        limits: Physical limits, or None if the description has none.
    """
    name: str = struct.field(pytree_node=False)
    type: str = struct.field(pytree_node=False)
    parent_link: str = struct.field(pytree_node=False)
    child_link: str = struct.field(pytree_node=False)
    origin: Pose = struct.field(default_factory=Pose)
    axis: Tuple[float, float, float] = (1.0, 0.0, 0.0)
    limits: Optional[JointLimits] = None

    @property
    def is_moveable(self) -> bool:
        return self.type != FIXED


@struct.dataclass
class Link:
    name: str = struct.field(pytree_node=False)
    parent_joint: Optional[str] = struct.field(pytree_node=False, default=None)


@struct.dataclass
class KinematicTree:
    """Immutable, queryable kinematic tree.

    Attributes:
        name: Robot name.
        root_link: Name of the only link without a parent joint.
        links: Read-only mapping from link name to Link.
        joints: Read-only mapping from joint name to Joint, in document order.
    """
    name: str = struct.field(pytree_node=False)
    root_link: str = struct.field(pytree_node=False)
    links: Mapping[str, Link] = struct.field(pytree_node=False)
    joints: Mapping[str, Joint] = struct.field(pytree_node=False)

    @classmethod
    def from_joints(cls, name: str, joints: Sequence[Joint], links: Iterable[str] = ()) -> "KinematicTree":
        """Build a tree from its joints.

        Args:
            name: Robot name.
            joints: All joints of the robot.
            links: Additional link names; links referenced by joints are
                collected automatically.

        Returns:
            KinematicTree with exactly one root link.
        """
        link_names = list(dict.fromkeys(links))
        joint_map: Dict[str, Joint] = {}
        parent_joints: Dict[str, str] = {}

        for joint in joints:
            if not joint.name:
                raise StructuralIntegrityError("Encountered a joint with an empty name.")
            if joint.name in joint_map:
                raise StructuralIntegrityError(f"Joint with name '{joint.name}' is defined twice.")
            if joint.child_link in parent_joints:
                raise StructuralIntegrityError(
                    f"Link with name '{joint.child_link}' has more than one parent joint."
                )
            joint_map[joint.name] = joint
            parent_joints[joint.child_link] = joint.name
            for link_name in (joint.parent_link, joint.child_link):
                if link_name not in link_names:
                    link_names.append(link_name)

        roots = [link_name for link_name in link_names if link_name not in parent_joints]
        if len(roots) != 1:
            raise StructuralIntegrityError(f"Expected exactly one root link, found: {roots}")

        # Breadth-first traversal from the root; links it misses sit on a cycle
        children: Dict[str, List[str]] = {}
        for joint in joint_map.values():
            children.setdefault(joint.parent_link, []).append(joint.child_link)
        visited = set()
        queue = deque([roots[0]])
        while queue:
            current_link = queue.popleft()
            if current_link in visited:
                continue
            visited.add(current_link)
            queue.extend(children.get(current_link, ()))
        unreachable = [link_name for link_name in link_names if link_name not in visited]
        if unreachable:
            raise StructuralIntegrityError(
                f"Links {unreachable} are not connected to root link '{roots[0]}'."
            )

        link_map = {
            link_name: Link(name=link_name, parent_joint=parent_joints.get(link_name))
            for link_name in link_names
        }
        return cls(
            name=name,
            root_link=roots[0],
            links=MappingProxyType(link_map),
            joints=MappingProxyType(joint_map),
        )

    def link(self, name: str) -> Link:
        if name not in self.links:
            raise StructuralIntegrityError(f"Could not find link with name '{name}'.")
        return self.links[name]

    def joint(self, name: str) -> Joint:
        if not name:
            raise StructuralIntegrityError("Given joint reference is empty.")
        if name not in self.joints:
            raise StructuralIntegrityError(f"Could not find joint with name '{name}'.")
        return self.joints[name]

    def parent_joint(self, link_name: str) -> Optional[Joint]:
        """Return the joint above ``link_name``, or None for the root link."""
        link = self.link(link_name)
        if link.parent_joint is None:
            return None
        return self.joint(link.parent_joint)

    def moveable_joint_names(self) -> Tuple[str, ...]:
        return tuple(name for name, joint in self.joints.items() if joint.is_moveable)
