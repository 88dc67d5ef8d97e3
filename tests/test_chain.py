"""Tests for chain resolution and the joint variable registry."""

from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from jax_kinspec.chain import chain_joint_names, continuous_joint_names, parent_link_index
from jax_kinspec.core import Joint, JointLimits, KinematicTree
from jax_kinspec.exceptions import NotFoundError, StructuralIntegrityError
from jax_kinspec.io import load_urdf
from jax_kinspec.registry import JointVariableRegistry

URDF_PATH = Path(__file__).parent / "fixtures" / "mobile_manipulator.urdf"

JOINT_TYPES = ["fixed", "revolute", "continuous", "prismatic"]


@pytest.fixture
def tree():
    return load_urdf(str(URDF_PATH))


@st.composite
def trees_with_chain(draw):
    """Random tree plus a (root, tip) pair where root is a strict ancestor of tip."""
    num_links = draw(st.integers(min_value=2, max_value=12))
    parents = [None] + [draw(st.integers(min_value=0, max_value=i - 1)) for i in range(1, num_links)]
    joints = [
        Joint(
            name=f"joint_{i}",
            type=draw(st.sampled_from(JOINT_TYPES)),
            parent_link=f"link_{parents[i]}",
            child_link=f"link_{i}",
            limits=JointLimits(lower=-1.0, upper=1.0, velocity=1.0),
        )
        for i in range(1, num_links)
    ]
    tree = KinematicTree.from_joints("random", joints)

    tip = draw(st.integers(min_value=1, max_value=num_links - 1))
    ancestors = []
    current = tip
    while parents[current] is not None:
        current = parents[current]
        ancestors.append(current)
    root = draw(st.sampled_from(ancestors))
    return tree, f"link_{root}", f"link_{tip}"


def test_parent_link_index(tree):
    index = parent_link_index(tree)

    assert index["torso_link"] == "base_link"
    assert index["gripper_link"] == "wrist_link"
    assert "base_link" not in index
    assert len(index) == len(tree.links) - 1


def test_chain_joint_names_root_to_tip(tree):
    """Test chain joints come out ordered from root to tip."""
    index = parent_link_index(tree)

    assert chain_joint_names(tree, index, "base_link", "gripper_link") == [
        "torso_lift_joint",
        "shoulder_joint",
        "elbow_joint",
        "wrist_roll_joint",
        "gripper_fixed_joint",
    ]
    assert chain_joint_names(tree, index, "base_link", "gripper_link", include_fixed=False) == [
        "torso_lift_joint",
        "shoulder_joint",
        "elbow_joint",
        "wrist_roll_joint",
    ]
    assert chain_joint_names(tree, index, "torso_link", "head_link") == [
        "head_mount_joint",
        "head_pan_joint",
    ]


def test_chain_from_link_to_itself_is_empty(tree):
    assert chain_joint_names(tree, parent_link_index(tree), "torso_link", "torso_link") == []


def test_continuous_joint_names(tree):
    index = parent_link_index(tree)

    assert continuous_joint_names(tree, index, "base_link", "gripper_link") == frozenset({"wrist_roll_joint"})
    assert continuous_joint_names(tree, index, "base_link", "head_link") == frozenset()


def test_unknown_tip_rejected(tree):
    with pytest.raises(StructuralIntegrityError, match="Could not find link with name 'ghost_link'"):
        chain_joint_names(tree, parent_link_index(tree), "base_link", "ghost_link")


def test_root_not_ancestor_of_tip_fails_at_tree_root(tree):
    """Test a disconnected pair walks to the tree root and fails there."""
    with pytest.raises(StructuralIntegrityError, match="Parent joint of link with name 'base_link'"):
        chain_joint_names(tree, parent_link_index(tree), "head_link", "gripper_link")


def test_missing_parent_link_entry_rejected(tree):
    index = dict(parent_link_index(tree))
    del index["wrist_link"]

    with pytest.raises(StructuralIntegrityError, match="Could not find parent link of link with name 'wrist_link'"):
        chain_joint_names(tree, index, "base_link", "gripper_link")


@given(trees_with_chain())
@settings(deadline=None, max_examples=50)
def test_chain_is_connected_root_to_tip(sample):
    """Property: consecutive chain joints share links, from root to tip."""
    tree, root, tip = sample
    joint_names = chain_joint_names(tree, parent_link_index(tree), root, tip)

    assert joint_names
    joints = [tree.joint(name) for name in joint_names]
    assert joints[0].parent_link == root
    assert joints[-1].child_link == tip
    for parent, child in zip(joints, joints[1:]):
        assert parent.child_link == child.parent_link


@given(trees_with_chain())
@settings(deadline=None, max_examples=50)
def test_moveable_chain_is_subsequence(sample):
    """Property: dropping fixed joints keeps the order of the remaining ones."""
    tree, root, tip = sample
    index = parent_link_index(tree)

    all_joints = chain_joint_names(tree, index, root, tip, include_fixed=True)
    moveable = chain_joint_names(tree, index, root, tip, include_fixed=False)

    assert moveable == [name for name in all_joints if tree.joint(name).type != "fixed"]


def test_registry_assigns_in_discovery_order():
    registry = JointVariableRegistry()

    assert registry.assign("b").index == 0
    assert registry.assign("a").index == 1
    assert registry.assign("c").index == 2
    assert registry.names() == ("b", "a", "c")
    assert list(registry) == ["b", "a", "c"]
    assert len(registry) == 3


def test_registry_assign_is_idempotent():
    registry = JointVariableRegistry()
    first = registry.assign("elbow")
    registry.assign("wrist")

    again = registry.assign("elbow")
    assert again is first
    assert again.index == 0
    assert registry.index_of("wrist") == 1
    assert len(registry) == 2
    assert "elbow" in registry
    assert registry.lookup("elbow").name == "elbow"


def test_registry_lookup_unknown():
    registry = JointVariableRegistry()

    with pytest.raises(NotFoundError, match="Could not find joint with name 'elbow'"):
        registry.lookup("elbow")


@given(st.lists(st.sampled_from(["a", "b", "c", "d", "e"]), max_size=30))
def test_registry_indices_follow_first_discovery(names):
    """Property: indices are dense, stable and ordered by first occurrence."""
    registry = JointVariableRegistry()
    for name in names:
        registry.assign(name)

    first_seen = list(dict.fromkeys(names))
    assert registry.names() == tuple(first_seen)
    for expected_index, name in enumerate(first_seen):
        assert registry.assign(name).index == expected_index
