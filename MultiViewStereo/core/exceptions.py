"""
Exceptions raised while building a dense cloud from known scene structure.

Everything except InsufficientDataError is fatal: it aborts the whole run and
propagates to the caller. Nothing in the package retries.
"""

from typing import Optional


class MultiViewStereoError(Exception):
    """Base class for all MultiViewStereo errors"""


class ConfigurationError(MultiViewStereoError, ValueError):
    """A required collaborator is missing or a configuration value is invalid"""


class ValidationError(MultiViewStereoError, ValueError):
    """Input data violates a contract (e.g. quality3D outside [0, 1])"""


class ResourceError(MultiViewStereoError, IOError):
    """An image needed by the current cluster could not be loaded"""

    def __init__(self, message: str, view_id: Optional[str] = None):
        super().__init__(message)
        self.view_id = view_id


class ComputationError(MultiViewStereoError, RuntimeError):
    """The fused disparity (or a geometric step feeding it) failed"""

    def __init__(self, message: str, view_id: Optional[str] = None):
        super().__init__(message)
        self.view_id = view_id


class InsufficientDataError(MultiViewStereoError):
    """
    A candidate center has no qualifying neighbor images.

    Recoverable: the driver logs it and moves on to the next candidate.
    """

    def __init__(self, message: str, view_id: Optional[str] = None):
        super().__init__(message)
        self.view_id = view_id


__all__ = [
    'MultiViewStereoError',
    'ConfigurationError',
    'ValidationError',
    'ResourceError',
    'ComputationError',
    'InsufficientDataError',
]
