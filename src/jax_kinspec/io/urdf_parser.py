"""URDF parser for loading kinematic trees.

This module parses URDF documents into the immutable KinematicTree the
specification compiler walks.
"""

import logging
from typing import List, Optional

import numpy as np
from lxml import etree

from jax_kinspec.core.tree import FIXED, Joint, JointLimits, KinematicTree, Pose
from jax_kinspec.exceptions import StructuralIntegrityError

logger = logging.getLogger(__name__)


def load_urdf(urdf_path: str) -> KinematicTree:
    """Load a URDF file and convert it to a KinematicTree.

    Args:
        urdf_path: Path to the URDF file to load.

    Returns:
        KinematicTree: The robot's kinematic structure.
    """
    tree = etree.parse(urdf_path)
    logger.info(f"Loaded URDF from {urdf_path}")
    return _build_tree(tree.getroot())


def parse_urdf(urdf_string: str) -> KinematicTree:
    """Parse a URDF document held in a string."""
    return _build_tree(etree.fromstring(urdf_string.encode("utf-8")))


def _build_tree(root) -> KinematicTree:
    robot_name = root.get('name', '')

    link_names = [link.get('name') for link in root.findall('link')]
    if any(not name for name in link_names):
        raise StructuralIntegrityError("Encountered a link without a name.")

    joints: List[Joint] = [_parse_joint(joint_elem) for joint_elem in root.findall('joint')]

    tree = KinematicTree.from_joints(robot_name, joints, links=link_names)
    logger.debug(
        f"Parsed robot '{robot_name}' with {len(tree.links)} links and {len(tree.joints)} joints, "
        f"root link '{tree.root_link}'"
    )
    return tree


def _parse_joint(joint_elem) -> Joint:
    joint_name = joint_elem.get('name')
    if not joint_name:
        raise StructuralIntegrityError("Encountered a joint without a name.")
    joint_type = joint_elem.get('type', 'unknown')

    parent_elem = joint_elem.find('parent')
    child_elem = joint_elem.find('child')
    if parent_elem is None or not parent_elem.get('link'):
        raise StructuralIntegrityError(f"Joint with name '{joint_name}' has no parent link.")
    if child_elem is None or not child_elem.get('link'):
        raise StructuralIntegrityError(f"Joint with name '{joint_name}' has no child link.")

    # Parse origin transform
    origin_elem = joint_elem.find('origin')
    if origin_elem is not None:
        xyz = _parse_floats(origin_elem.get('xyz', '0 0 0'), joint_name)
        rpy = _parse_floats(origin_elem.get('rpy', '0 0 0'), joint_name)
        origin = Pose(position=tuple(xyz), rotation=tuple(_rpy_to_quaternion(rpy)))
    else:
        origin = Pose()

    # Parse joint axis, URDF defaults to the x axis
    axis_elem = joint_elem.find('axis')
    axis = np.array([1.0, 0.0, 0.0])
    if axis_elem is not None:
        axis = _parse_floats(axis_elem.get('xyz', '1 0 0'), joint_name)
    norm = np.linalg.norm(axis)
    if norm < 1e-12:
        if joint_type != FIXED:
            raise StructuralIntegrityError(f"Joint with name '{joint_name}' has a zero-length axis.")
    else:
        axis = axis / norm

    return Joint(
        name=joint_name,
        type=joint_type,
        parent_link=parent_elem.get('link'),
        child_link=child_elem.get('link'),
        origin=origin,
        axis=tuple(float(a) for a in axis),
        limits=_parse_limits(joint_elem.find('limit')),
    )


def _parse_limits(limit_elem) -> Optional[JointLimits]:
    if limit_elem is None:
        return None
    return JointLimits(
        lower=float(limit_elem.get('lower', 0.0)),
        upper=float(limit_elem.get('upper', 0.0)),
        velocity=float(limit_elem.get('velocity', 0.0)),
        effort=float(limit_elem.get('effort', 0.0)),
    )


def _parse_floats(text: str, joint_name: str) -> np.ndarray:
    values = np.array([float(x) for x in text.split()])
    if values.shape != (3,):
        raise StructuralIntegrityError(
            f"Joint with name '{joint_name}' has malformed vector attribute '{text}'."
        )
    return values


def _rpy_to_quaternion(rpy: np.ndarray) -> np.ndarray:
    """Convert roll-pitch-yaw angles to a quaternion.

    Args:
        rpy: Array of [roll, pitch, yaw] angles in radians.

    Returns:
        Unit quaternion (w, x, y, z) of the rotation R = R_z * R_y * R_x.
    """
    half_roll, half_pitch, half_yaw = np.asarray(rpy) / 2.0

    cr, sr = np.cos(half_roll), np.sin(half_roll)
    cp, sp = np.cos(half_pitch), np.sin(half_pitch)
    cy, sy = np.cos(half_yaw), np.sin(half_yaw)

    quaternion = np.array([
        cr * cp * cy + sr * sp * sy,
        sr * cp * cy - cr * sp * sy,
        cr * sp * cy + sr * cp * sy,
        cr * cp * sy - sr * sp * cy,
    ])
    return quaternion / np.linalg.norm(quaternion)
