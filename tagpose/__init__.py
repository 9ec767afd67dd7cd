"""
Robot pose estimation from AprilTag detections on a known field.
Fuses the tags seen by one or more cameras into a single field-relative robot pose.
"""

__all__ = ["u", "PoseEstimator", "PoseStrategy", "EstimatorConfig", "EstimatedRobotPose"]

# fmt: off

# Initialize the unit registry before importing anything that relies on it
from pint import UnitRegistry
u = UnitRegistry()

from .estimator import PoseEstimator, PoseStrategy, EstimatorConfig
from .targets import EstimatedRobotPose
