"""Kinematic chain resolution.

A chain is identified by a (root link, tip link) pair. Resolution walks the
tree from the tip upwards until it reaches the root and reports the joints it
crossed in root-to-tip order.
"""

from types import MappingProxyType
from typing import FrozenSet, List, Mapping, Tuple

from .core.tree import CONTINUOUS, FIXED, KinematicTree
from .exceptions import StructuralIntegrityError

ChainKey = Tuple[str, str]


def parent_link_index(tree: KinematicTree) -> Mapping[str, str]:
    """Map every non-root link name to the name of its parent link."""
    index = {
        link_name: tree.joint(link.parent_joint).parent_link
        for link_name, link in tree.links.items()
        if link.parent_joint is not None
    }
    return MappingProxyType(index)


def chain_joint_names(
    tree: KinematicTree,
    parent_links: Mapping[str, str],
    root: str,
    tip: str,
    include_fixed: bool = True,
) -> List[str]:
    """Names of the joints between ``root`` and ``tip``, ordered root to tip.

    ``root`` must be an ancestor of ``tip``. This is not checked upfront: the
    walk continues past the tree root and fails there because the tree root
    has no parent joint.

    Args:
        tree: Kinematic tree to walk.
        parent_links: Parent-link index of ``tree``.
        root: Link at which the walk stops.
        tip: Link at which the walk starts.
        include_fixed: Whether fixed joints are reported.

    Returns:
        List of joint names.
    """
    joint_names = []

    current_link = tip
    while current_link != root:
        parent_joint = tree.parent_joint(current_link)
        if parent_joint is None:
            raise StructuralIntegrityError(
                f"Parent joint of link with name '{current_link}' is missing."
            )

        if include_fixed or parent_joint.type != FIXED:
            joint_names.append(parent_joint.name)

        if current_link not in parent_links:
            raise StructuralIntegrityError(
                f"Could not find parent link of link with name '{current_link}'."
            )
        current_link = parent_links[current_link]

    joint_names.reverse()
    return joint_names


def continuous_joint_names(
    tree: KinematicTree, parent_links: Mapping[str, str], root: str, tip: str
) -> FrozenSet[str]:
    """Names of the continuous joints between ``root`` and ``tip``."""
    return frozenset(
        name
        for name in chain_joint_names(tree, parent_links, root, tip, include_fixed=False)
        if tree.joint(name).type == CONTINUOUS
    )
