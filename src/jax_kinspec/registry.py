"""Registry of symbolic joint input variables."""

from typing import Dict, Iterator, List, Tuple

from .exceptions import NotFoundError
from .expressions import DoubleInput


class JointVariableRegistry:
    """Assigns a stable input index to every distinct moveable joint.

    Indices start at 0 and follow first-discovery order. A joint keeps its
    index and its DoubleInput node for the lifetime of the registry, so the
    index doubles as the joint's position in the solver's control vector.
    """

    def __init__(self):
        self._variables: Dict[str, DoubleInput] = {}
        self._order: List[str] = []

    def assign(self, joint_name: str) -> DoubleInput:
        """Return the input variable of ``joint_name``, creating it on first use."""
        variable = self._variables.get(joint_name)
        if variable is None:
            variable = DoubleInput(index=len(self._order), name=joint_name)
            self._variables[joint_name] = variable
            self._order.append(joint_name)
        return variable

    def lookup(self, joint_name: str) -> DoubleInput:
        if joint_name not in self._variables:
            raise NotFoundError(f"Could not find joint with name '{joint_name}'.")
        return self._variables[joint_name]

    def index_of(self, joint_name: str) -> int:
        return self.lookup(joint_name).index

    def names(self) -> Tuple[str, ...]:
        """Joint names in input index order."""
        return tuple(self._order)

    def __contains__(self, joint_name: str) -> bool:
        return joint_name in self._variables

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())
