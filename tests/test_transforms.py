"""Tests for the transforms module."""

import jax
import jax.numpy as jnp
import numpy as np
from hypothesis import given, settings
from hypothesis import strategies as st

from jax_kinspec.transforms import se3, so3


def test_quaternion_to_matrix_identity():
    """Test from_quaternion with identity quaternion."""
    identity_quat = jnp.array([1.0, 0.0, 0.0, 0.0])
    matrix = so3.from_quaternion(identity_quat)
    np.testing.assert_allclose(matrix, jnp.eye(3), rtol=1e-6, atol=1e-6)


def test_quaternion_to_matrix_jit():
    """Test from_quaternion with JIT."""
    jitted_func = jax.jit(so3.from_quaternion)
    quat = jnp.array([0.7071068, 0.0, 0.7071068, 0.0])  # 90° around Y
    matrix = jitted_func(quat)
    expected = jnp.array([[0.0, 0.0, 1.0], [0.0, 1.0, 0.0], [-1.0, 0.0, 0.0]])
    np.testing.assert_allclose(matrix, expected, rtol=1e-6, atol=1e-6)


def test_skew_symmetric():
    """Test skew-symmetric matrix function."""
    v = jnp.array([1.0, 2.0, 3.0])
    K = so3.skew_symmetric(v)

    expected = jnp.array([[0.0, -3.0, 2.0], [3.0, 0.0, -1.0], [-2.0, 1.0, 0.0]])
    np.testing.assert_allclose(K, expected, rtol=1e-6, atol=1e-6)
    np.testing.assert_allclose(K, -K.T, rtol=1e-6, atol=1e-6)


def test_axis_angle_zero_is_identity():
    R = so3.from_axis_angle(jnp.array([0.0, 0.0, 1.0]), 0.0)
    np.testing.assert_allclose(R, jnp.eye(3), rtol=1e-12, atol=1e-12)


def test_axis_angle_quarter_turn_z():
    """Test 90° about Z maps the x axis onto the y axis."""
    R = so3.from_axis_angle(jnp.array([0.0, 0.0, 1.0]), jnp.pi / 2)

    v_rotated = R @ jnp.array([1.0, 0.0, 0.0])
    np.testing.assert_allclose(v_rotated, jnp.array([0.0, 1.0, 0.0]), rtol=1e-9, atol=1e-9)


def test_axis_angle_normalizes_axis():
    R_unit = so3.from_axis_angle(jnp.array([0.0, 1.0, 0.0]), 0.7)
    R_scaled = so3.from_axis_angle(jnp.array([0.0, 5.0, 0.0]), 0.7)
    np.testing.assert_allclose(R_unit, R_scaled, rtol=1e-12, atol=1e-12)


def test_axis_angle_gradient_finite_at_zero():
    """Test the rotation stays differentiable in the angle at zero."""
    axis = jnp.array([0.0, 0.0, 1.0])
    dR = jax.jacfwd(lambda angle: so3.from_axis_angle(axis, angle))(0.0)

    assert jnp.isfinite(dR).all()
    np.testing.assert_allclose(dR, so3.skew_symmetric(axis), rtol=1e-12, atol=1e-12)


@given(
    st.floats(min_value=-np.pi, max_value=np.pi),
    st.floats(min_value=-np.pi, max_value=np.pi),
)
@settings(deadline=None, max_examples=25)
def test_axis_angle_composes_about_shared_axis(a, b):
    """Property: rotations about one axis add their angles."""
    axis = jnp.array([0.3, -0.5, 0.8])
    R_ab = so3.from_axis_angle(axis, a) @ so3.from_axis_angle(axis, b)
    np.testing.assert_allclose(R_ab, so3.from_axis_angle(axis, a + b), rtol=1e-9, atol=1e-9)


@given(st.integers(min_value=0, max_value=100))
@settings(deadline=None, max_examples=25)
def test_quaternion_matrix_is_orthonormal(seed):
    """Property: any quaternion yields a proper rotation matrix."""
    quat = jax.random.uniform(jax.random.PRNGKey(seed), (4,), minval=-1.0, maxval=1.0)
    R = so3.from_quaternion(quat)

    np.testing.assert_allclose(R @ R.T, jnp.eye(3), rtol=1e-9, atol=1e-9)
    np.testing.assert_allclose(jnp.linalg.det(R), 1.0, rtol=1e-9, atol=1e-9)


def test_se3_from_position_and_rotation():
    """Test SE(3) construction from position and rotation."""
    p = jnp.array([1.0, 2.0, 3.0])
    R = jnp.eye(3)

    T = se3.from_position_and_rotation(p, R)

    expected = jnp.array([[1.0, 0.0, 0.0, 1.0], [0.0, 1.0, 0.0, 2.0], [0.0, 0.0, 1.0, 3.0], [0.0, 0.0, 0.0, 1.0]])
    np.testing.assert_allclose(T, expected, rtol=1e-6, atol=1e-6)


def test_se3_multiply():
    """Test composition of frames."""
    t1 = se3.from_position_and_rotation(jnp.array([1.0, 0.0, 0.0]), jnp.eye(3))

    R_z90 = so3.from_quaternion(jnp.array([0.7071068, 0.0, 0.0, 0.7071068]))
    t2 = se3.from_position_and_rotation(jnp.array([0.0, 1.0, 0.0]), R_z90)

    result = se3.multiply(t1, t2)

    np.testing.assert_allclose(se3.get_position(result), jnp.array([1.0, 1.0, 0.0]), rtol=1e-6, atol=1e-6)
    np.testing.assert_allclose(se3.get_rotation(result), R_z90, rtol=1e-6, atol=1e-6)


def test_se3_get_position_rotation():
    """Test SE(3) position and rotation extraction."""
    p = jnp.array([1.0, 2.0, 3.0])
    R = so3.from_axis_angle(jnp.array([0.1, 0.2, 0.3]), 0.4)

    T = se3.from_position_and_rotation(p, R)

    np.testing.assert_allclose(se3.get_position(T), p, rtol=1e-6, atol=1e-6)
    np.testing.assert_allclose(se3.get_rotation(T), R, rtol=1e-6, atol=1e-6)
    np.testing.assert_allclose(se3.identity(), jnp.eye(4))
