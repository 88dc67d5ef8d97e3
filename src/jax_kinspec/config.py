"""Robot configuration loaded from YAML.

A configuration names the chains to compile and the per-joint weights and
velocity thresholds used by the constraint synthesizer::

    root_link: base_link
    tip_links: [gripper_link]
    chains:
      - [torso_link, head_link]
    weights:
      default_joint_weight: 0.001
      torso_lift_joint: 0.01
    thresholds:
      default_joint_velocity: 0.5
"""

import logging
from dataclasses import dataclass, field
from numbers import Real
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple, Union

import yaml

from .exceptions import InvalidConfigurationError, MissingConfigurationError

logger = logging.getLogger(__name__)

ChainSpec = Union[str, Tuple[str, str]]


@dataclass(frozen=True)
class RobotConfig:
    """Chains, weights and thresholds of one robot.

    Attributes:
        root_link: Root link paired with every plain tip link in ``chains``.
        chains: Tip link names and explicit (root, tip) pairs, in the order
            their joints are to be discovered.
        weights: Joint name to nonnegative weight.
        thresholds: Joint name to velocity threshold.
    """
    root_link: str
    chains: Tuple[ChainSpec, ...] = ()
    weights: Mapping[str, float] = field(default_factory=dict)
    thresholds: Mapping[str, float] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RobotConfig":
        if not isinstance(data, Mapping):
            raise InvalidConfigurationError(f"Robot configuration must be a mapping, got {type(data).__name__}.")
        root_link = data.get('root_link')
        if not root_link:
            raise MissingConfigurationError("Robot configuration has no 'root_link'.")

        chains = []
        for tip in data.get('tip_links') or ():
            if not isinstance(tip, str):
                raise InvalidConfigurationError(f"Tip link must be a link name, got {tip!r}.")
            chains.append(tip)
        for pair in data.get('chains') or ():
            if isinstance(pair, str) or len(pair) != 2 or not all(isinstance(name, str) for name in pair):
                raise InvalidConfigurationError(f"Chain must be a (root, tip) pair of link names, got {pair!r}.")
            chains.append((pair[0], pair[1]))

        return cls(
            root_link=str(root_link),
            chains=tuple(chains),
            weights=_numeric_mapping(data.get('weights') or {}, 'weights'),
            thresholds=_numeric_mapping(data.get('thresholds') or {}, 'thresholds'),
        )


def load_robot_config(path: Union[str, Path]) -> RobotConfig:
    """Load a RobotConfig from a YAML file."""
    with open(path, 'r') as f:
        data = yaml.safe_load(f)
    config = RobotConfig.from_dict(data)
    logger.info(f"Robot configuration loaded from: {path}")
    return config


def _numeric_mapping(values: Any, section: str) -> Dict[str, float]:
    if not isinstance(values, Mapping):
        raise InvalidConfigurationError(f"Section '{section}' must be a mapping.")
    result = {}
    for name, value in values.items():
        if isinstance(value, bool) or not isinstance(value, Real):
            raise InvalidConfigurationError(
                f"Value of '{name}' in section '{section}' must be a number, got {value!r}."
            )
        result[str(name)] = float(value)
    return result
