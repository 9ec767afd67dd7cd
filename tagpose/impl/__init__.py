"""
Contains default implementations of camera sources. The user should instantiate these when
creating their pose estimators.
"""

__all__ = [
    "PhotonCameraSource",
    "DummyCameraSource",
]

from .camera import PhotonCameraSource, DummyCameraSource
