"""Symbolic expression algebra evaluated with JAX.

Expressions are small immutable trees of nodes. Nothing is computed when a
node is built; ``evaluate(q)`` walks the tree against an input vector ``q``
using ``jax.numpy``, so any expression can be jit-compiled or differentiated
with respect to ``q`` by the consumer.

Nodes compare and hash by identity. Two structurally equal expressions are
different objects; callers may rely on ``is`` to recognise a shared node
(for instance a cached forward-kinematics frame), never on value equality.
"""

from dataclasses import dataclass, field
from functools import reduce
from typing import Callable, Dict, FrozenSet, Optional, Tuple

import jax
import jax.numpy as jnp

from .transforms import se3, so3

Array = jax.Array
Cache = Dict[int, Array]


class Expression:
    """Base class of all expression nodes."""

    def evaluate(self, q, cache: Optional[Cache] = None) -> Array:
        """Evaluate this expression for the input vector ``q``.

        Args:
            q: (num_inputs,) array of input values.
            cache: Values of cached nodes already materialized during this
                evaluation pass, keyed by node identity.

        Returns:
            A scalar, (3,) vector, (3, 3) rotation or (4, 4) frame.
        """
        if cache is None:
            cache = {}
        return self._evaluate(jnp.asarray(q), cache)

    def _evaluate(self, q: Array, cache: Cache) -> Array:
        raise NotImplementedError

    def children(self) -> Tuple["Expression", ...]:
        return ()

    def input_indices(self) -> FrozenSet[int]:
        """Input indices this expression depends on."""
        indices = set()
        stack = [self]
        while stack:
            node = stack.pop()
            if isinstance(node, DoubleInput):
                indices.add(node.index)
            stack.extend(node.children())
        return frozenset(indices)


class DoubleExpression(Expression):
    pass


class VectorExpression(Expression):
    pass


class RotationExpression(Expression):
    pass


class FrameExpression(Expression):
    pass


# Scalars

@dataclass(frozen=True, eq=False)
class DoubleConst(DoubleExpression):
    value: float

    def _evaluate(self, q, cache):
        return jnp.asarray(self.value, dtype=jnp.float64)


@dataclass(frozen=True, eq=False)
class DoubleInput(DoubleExpression):
    """The ``index``-th entry of the input vector."""
    index: int
    name: str = ""

    def _evaluate(self, q, cache):
        return q[self.index]


@dataclass(frozen=True, eq=False)
class DoubleSub(DoubleExpression):
    """First operand minus all remaining operands."""
    operands: Tuple[DoubleExpression, ...]

    def __post_init__(self):
        if not self.operands:
            raise ValueError("DoubleSub requires at least one operand")
        object.__setattr__(self, "operands", tuple(self.operands))

    def _evaluate(self, q, cache):
        first, *rest = (operand.evaluate(q, cache) for operand in self.operands)
        return reduce(jnp.subtract, rest, first)

    def children(self):
        return self.operands


# Vectors

@dataclass(frozen=True, eq=False)
class VectorConstructor(VectorExpression):
    x: DoubleExpression = field(default_factory=lambda: DoubleConst(0.0))
    y: DoubleExpression = field(default_factory=lambda: DoubleConst(0.0))
    z: DoubleExpression = field(default_factory=lambda: DoubleConst(0.0))

    @classmethod
    def from_values(cls, values) -> "VectorConstructor":
        x, y, z = values
        return cls(DoubleConst(float(x)), DoubleConst(float(y)), DoubleConst(float(z)))

    def _evaluate(self, q, cache):
        return jnp.stack([
            self.x.evaluate(q, cache),
            self.y.evaluate(q, cache),
            self.z.evaluate(q, cache),
        ])

    def children(self):
        return (self.x, self.y, self.z)


@dataclass(frozen=True, eq=False)
class VectorDoubleMul(VectorExpression):
    vector: VectorExpression
    scalar: DoubleExpression

    def _evaluate(self, q, cache):
        return self.vector.evaluate(q, cache) * self.scalar.evaluate(q, cache)

    def children(self):
        return (self.vector, self.scalar)


# Rotations

@dataclass(frozen=True, eq=False)
class QuaternionConst(RotationExpression):
    """Constant rotation given as a (w, x, y, z) quaternion."""
    w: float = 1.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def _evaluate(self, q, cache):
        return so3.from_quaternion(jnp.array([self.w, self.x, self.y, self.z]))


@dataclass(frozen=True, eq=False)
class AxisAngle(RotationExpression):
    axis: VectorExpression
    angle: DoubleExpression

    def _evaluate(self, q, cache):
        return so3.from_axis_angle(self.axis.evaluate(q, cache), self.angle.evaluate(q, cache))

    def children(self):
        return (self.axis, self.angle)


# Frames

@dataclass(frozen=True, eq=False)
class FrameConstructor(FrameExpression):
    """Frame from a translation and a rotation; identity by default."""
    translation: VectorExpression = field(default_factory=VectorConstructor)
    rotation: RotationExpression = field(default_factory=QuaternionConst)

    def _evaluate(self, q, cache):
        return se3.from_position_and_rotation(
            self.translation.evaluate(q, cache), self.rotation.evaluate(q, cache)
        )

    def children(self):
        return (self.translation, self.rotation)


@dataclass(frozen=True, eq=False)
class FrameMultiplication(FrameExpression):
    """Left-to-right product of frames: frames[0] @ frames[1] @ ..."""
    frames: Tuple[FrameExpression, ...]

    def __post_init__(self):
        object.__setattr__(self, "frames", tuple(self.frames))

    def _evaluate(self, q, cache):
        values = [frame.evaluate(q, cache) for frame in self.frames]
        return reduce(se3.multiply, values, se3.identity())

    def children(self):
        return self.frames


@dataclass(frozen=True, eq=False)
class CachedFrame(FrameExpression):
    """Frame that is materialized at most once per evaluation pass.

    Every expression that references the same CachedFrame object shares one
    evaluation of the wrapped frame when evaluated with a common cache.
    """
    frame: FrameExpression

    def evaluate(self, q, cache: Optional[Cache] = None) -> Array:
        if cache is None:
            cache = {}
        key = id(self)
        if key not in cache:
            cache[key] = self.frame.evaluate(q, cache)
        return cache[key]

    def children(self):
        return (self.frame,)


def jit_compile(expression: Expression) -> Callable[[Array], Array]:
    """Return a jit-compiled ``q -> value`` function for ``expression``."""

    @jax.jit
    def evaluate(q):
        return expression.evaluate(q)

    return evaluate
