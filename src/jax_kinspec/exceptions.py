"""Exceptions raised while compiling a kinematic tree into specifications."""


class KinematicSpecError(Exception):
    """Base class for jax_kinspec exceptions."""


class StructuralIntegrityError(KinematicSpecError):
    """Exception raised when the kinematic tree is inconsistent or incomplete.

    Covers unknown link/joint names, missing parent joints, missing entries
    in the parent-link index and empty joint references.
    """


class UnsupportedJointTypeError(KinematicSpecError):
    """Exception raised when a joint type cannot be turned into a transform."""

    def __init__(self, joint_name: str, joint_type: str, modeled: bool = True):
        self.joint_name = joint_name
        self.joint_type = joint_type
        kind = "unsupported" if modeled else "unmodeled"
        super().__init__(f"Joint with name '{joint_name}' has {kind} type '{joint_type}'.")


class MissingConfigurationError(KinematicSpecError):
    """Exception raised when a required configuration value cannot be resolved."""


class InvalidConfigurationError(KinematicSpecError):
    """Exception raised when a configuration value is malformed or out of range."""


class SafetyViolationError(KinematicSpecError):
    """Exception raised when a configured velocity exceeds the physical limit."""

    def __init__(self, joint_name: str, requested: float, physical: float):
        self.joint_name = joint_name
        self.requested = requested
        self.physical = physical
        super().__init__(
            f"Came up with velocity limit {requested} faster than physical limit "
            f"{physical} for joint '{joint_name}'."
        )


class NotFoundError(KinematicSpecError, LookupError):
    """Exception raised when querying a chain or joint that was never registered."""
