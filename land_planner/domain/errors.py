"""
Domain error hierarchy.

Every error here is also a ValueError so the global error handler maps
it to a 400 response without knowing about the individual types.
"""


class LandPlannerError(Exception):
    """Base error for land planning operations."""


class InvalidScaleError(LandPlannerError, ValueError):
    """Scale (meters per working unit) is not strictly positive."""

    def __init__(self, scale: float):
        self.scale = scale
        super().__init__(f"Scale must be strictly positive, got {scale}")


class InvalidSpacingError(LandPlannerError, ValueError):
    """Tree spacing does not produce a strictly positive grid step."""


class InvalidBufferError(LandPlannerError, ValueError):
    """Buffer distance is negative or not finite."""


class CaptureError(LandPlannerError, ValueError):
    """A boundary capture event could not be applied."""
