"""Robot facade: compiles a kinematic tree into controller specifications.

All work happens in the constructor. For every requested chain the robot
resolves the chain's joints, registers input variables for newly discovered
moveable joints, builds the chain's cached forward-kinematics frame and
synthesizes controllable and hard constraints. Afterwards the robot only
answers queries.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional, Sequence, Set, Tuple

from .chain import ChainKey, chain_joint_names, continuous_joint_names, parent_link_index
from .config import ChainSpec, RobotConfig
from .constraints import (
    DEFAULT_JOINT_VELOCITY_KEY,
    DEFAULT_JOINT_WEIGHT_KEY,
    ControllableConstraint,
    HardConstraint,
    controllable_constraint,
    hard_constraint,
)
from .core.tree import CONTINUOUS, KinematicTree
from .exceptions import InvalidConfigurationError
from .expressions import CachedFrame, DoubleInput
from .kinematics import ForwardKinematicsCache
from .registry import JointVariableRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScopeEntry:
    """A named expression exported for constraint-authoring code."""
    name: str
    expression: CachedFrame


class Robot:
    """Forward kinematics, joint variables and joint constraints of a robot.

    Args:
        tree: Kinematic tree. Borrowed read-only, never mutated.
        root_link: Root link paired with every plain tip link in ``chains``.
        chains: Tip link names and explicit (root, tip) pairs. Joint input
            indices follow the order in which chains are given here.
        weights: Joint name to nonnegative weight, optionally with the
            ``default_joint_weight`` key.
        thresholds: Joint name to velocity threshold, optionally with the
            ``default_joint_velocity`` key.
    """

    DEFAULT_JOINT_WEIGHT_KEY = DEFAULT_JOINT_WEIGHT_KEY
    DEFAULT_JOINT_VELOCITY_KEY = DEFAULT_JOINT_VELOCITY_KEY

    def __init__(
        self,
        tree: KinematicTree,
        root_link: str,
        chains: Sequence[ChainSpec],
        weights: Optional[Mapping[str, float]] = None,
        thresholds: Optional[Mapping[str, float]] = None,
    ):
        self._tree = tree
        self._root_link = root_link
        self._weights = MappingProxyType(dict(weights or {}))
        self._thresholds = MappingProxyType(dict(thresholds or {}))

        self._parent_links = parent_link_index(tree)
        self._joints = JointVariableRegistry()
        self._fk = ForwardKinematicsCache()
        self._chains: List[ChainKey] = []
        self._controllable: Dict[str, ControllableConstraint] = {}
        self._hard: List[HardConstraint] = []
        self._constrained: Set[str] = set()

        for chain in chains:
            self._init_kinematic_chain(_chain_key(root_link, chain))

        logger.info(
            f"Robot '{tree.name}' compiled {len(self._chains)} chains with "
            f"{len(self._joints)} moveable joints"
        )

    @classmethod
    def from_config(cls, tree: KinematicTree, config: RobotConfig) -> "Robot":
        return cls(tree, config.root_link, config.chains, config.weights, config.thresholds)

    def _init_kinematic_chain(self, key: ChainKey):
        if key in self._fk:
            logger.debug(f"Chain ('{key[0]}', '{key[1]}') already compiled")
            return
        root, tip = key

        moveable_joint_names = self.chain_joint_names(root, tip, include_fixed=False)
        all_joint_names = self.chain_joint_names(root, tip, include_fixed=True)

        for joint_name in moveable_joint_names:
            if joint_name not in self._joints:
                variable = self._joints.assign(joint_name)
                logger.debug(f"Joint '{joint_name}' assigned input {variable.index}")

        self._fk.get_or_build(self._tree, key, all_joint_names, self._joints)
        self._chains.append(key)

        for joint_name in moveable_joint_names:
            if joint_name in self._constrained:
                continue
            joint = self._tree.joint(joint_name)
            variable = self._joints.lookup(joint_name)
            self._controllable[joint_name] = controllable_constraint(
                joint, variable, self._weights, self._thresholds
            )
            constraint = hard_constraint(joint, variable)
            if constraint is not None:
                self._hard.append(constraint)
            self._constrained.add(joint_name)

        logger.info(f"Compiled chain ('{root}', '{tip}') with {len(all_joint_names)} joints")

    @property
    def root_link(self) -> str:
        return self._root_link

    @property
    def tree(self) -> KinematicTree:
        return self._tree

    @property
    def number_of_joints(self) -> int:
        return len(self._joints)

    def forward_kinematics(self, root: str, tip: str) -> CachedFrame:
        """Cached frame of ``tip`` relative to ``root``; the same object on every call."""
        return self._fk.get((root, tip))

    def joint(self, joint_name: str) -> DoubleInput:
        return self._joints.lookup(joint_name)

    def joint_names(self) -> Tuple[str, ...]:
        """Moveable joint names in input index order."""
        return self._joints.names()

    def chains(self) -> Tuple[ChainKey, ...]:
        return tuple(self._chains)

    def controllable_constraints(self) -> List[ControllableConstraint]:
        """Controllable constraints ordered by input index."""
        return sorted(self._controllable.values(), key=lambda spec: spec.input_number)

    def hard_constraints(self) -> List[HardConstraint]:
        """Hard constraints in joint discovery order."""
        return list(self._hard)

    def scope(self) -> List[ScopeEntry]:
        """One entry per chain, named after its tip link.

        Chains sharing a tip link produce one entry each.
        """
        return [ScopeEntry(tip, self._fk.get((root, tip))) for root, tip in self._chains]

    def chain_joint_names(self, root: str, tip: str, include_fixed: bool = True) -> List[str]:
        return chain_joint_names(self._tree, self._parent_links, root, tip, include_fixed)

    def continuous_joint_names(self, root: str, tip: str) -> FrozenSet[str]:
        return continuous_joint_names(self._tree, self._parent_links, root, tip)

    def is_continuous_joint(self, joint_name: str) -> bool:
        return self._tree.joint(joint_name).type == CONTINUOUS


def _chain_key(root_link: str, chain: ChainSpec) -> ChainKey:
    if isinstance(chain, str):
        return root_link, chain
    if not isinstance(chain, Sequence) or len(chain) != 2 or not all(isinstance(name, str) for name in chain):
        raise InvalidConfigurationError(
            f"Chain must be a tip link name or a (root, tip) pair of link names, got {chain!r}."
        )
    return chain[0], chain[1]
