from dataclasses import dataclass
from typing import Optional

import wpilib
from pint import Quantity
from wpimath.geometry import Pose2d, Rotation3d, Transform3d, Translation3d

from . import u
from .estimator import PoseEstimator
from .impl import PhotonCameraSource
from .strategies import FieldLayout, PoseStrategy
from .targets import EstimatedRobotPose


@dataclass
class CameraDefinition:
    name: str
    robot_to_camera: Transform3d

    @classmethod
    def from_mount(
        cls,
        name: str,
        x: Quantity,
        y: Quantity,
        z: Quantity,
        roll: Quantity = 0 * u.deg,
        pitch: Quantity = 0 * u.deg,
        yaw: Quantity = 0 * u.deg,
    ) -> "CameraDefinition":
        """
        Define a camera by where it's mounted on the robot.

        Positions are measured from the centre of the robot at floor level, where +X is forward, +Y is left, and +Z is
        up. Any length and angle units may be used.

        :param name: Name of the camera as configured in the PhotonVision UI
        :param x: Forward offset of the camera lens
        :param y: Leftward offset of the camera lens
        :param z: Height of the camera lens above the floor
        :param roll: CCW+ rotation around the camera's forward axis
        :param pitch: Rotation around the robot's Y-axis. Because +Y is left, a positive pitch tilts the camera down
        :param yaw: CCW+ rotation around the vertical axis
        """
        translation = Translation3d(x.m_as(u.m), y.m_as(u.m), z.m_as(u.m))
        rotation = Rotation3d(roll.m_as(u.rad), pitch.m_as(u.rad), yaw.m_as(u.rad))
        return cls(name, Transform3d(translation, rotation))


class AprilTagCameraCollection:
    def __init__(
        self,
        camera_definitions: list[CameraDefinition],
        field_layout: FieldLayout,
        strategy: PoseStrategy = PoseStrategy.CLOSEST_TO_REFERENCE_POSE,
    ):
        """
        A group of AprilTag cameras on the same robot, each with its own pose estimator.

        :param camera_definitions: Name and mounting position of each camera
        :param field_layout: Map of AprilTag IDs to their poses on the field
        :param strategy: Strategy used by every camera's estimator
        """

        self.pose_estimators: dict[str, PoseEstimator] = {}
        for definition in camera_definitions:
            estimator = PoseEstimator(
                field_layout, strategy, PhotonCameraSource(definition.name), definition.robot_to_camera
            )
            self.pose_estimators[definition.name] = estimator
            wpilib.SmartDashboard.putData(f"Pose Estimator {definition.name}", estimator)

    def set_strategy(self, strategy: PoseStrategy):
        for estimator in self.pose_estimators.values():
            estimator.strategy = strategy

    def estimate_poses(self, reference_pose: Optional[Pose2d] = None) -> list[EstimatedRobotPose]:
        """
        Pull the newest frame from every camera and estimate the robot's pose from each.

        :param reference_pose: The robot's current best-known pose, for the CLOSEST_TO_REFERENCE_POSE strategy
        :return: One estimate per camera that produced one, oldest first
        """
        estimates = []
        for estimator in self.pose_estimators.values():
            if reference_pose is not None:
                estimator.set_reference_pose(reference_pose)
            estimate = estimator.update()
            if estimate is not None:
                estimates.append(estimate)

        return sorted(estimates, key=lambda estimate: estimate.timestamp_seconds)

    def estimate_pose(self, previous_estimated_pose: Pose2d) -> Optional[Pose2d]:
        """
        The newest vision pose across all cameras, flattened onto the floor.
        Suitable as the vision_pose_callback of a swerve drive.

        :param previous_estimated_pose: The robot's current best-known pose, e.g. from odometry
        """
        estimates = self.estimate_poses(previous_estimated_pose)
        if not estimates:
            return None
        return estimates[-1].estimated_pose.toPose2d()
