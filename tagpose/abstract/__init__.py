"""
Contains interfaces for the collaborators of the pose estimator.
Implementations can be found in the impl module, or the user may define their own.
"""

__all__ = ["CameraSource"]

from .camera import CameraSource
