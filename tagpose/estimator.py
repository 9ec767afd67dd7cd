"""The pose estimator and the configuration it owns"""

import logging
from dataclasses import dataclass, field
from functools import singledispatchmethod
from typing import Optional

from wpimath.geometry import Pose2d, Pose3d, Transform3d
from wpiutil import Sendable, SendableBuilder

from . import strategies
from .abstract import CameraSource
from .strategies import FieldLayout, PoseStrategy
from .targets import DetectionResult, EstimatedRobotPose

logger = logging.getLogger(__name__)


@dataclass
class EstimatorConfig:
    field_layout: FieldLayout
    strategy: PoseStrategy
    camera: Optional[CameraSource] = None

    # Transform from the centre of the robot to the camera mount (robot -> camera)
    robot_to_camera: Transform3d = field(default_factory=Transform3d)

    # Only read by CLOSEST_TO_REFERENCE_POSE
    reference_pose: Optional[Pose3d] = None
    # Only read by CLOSEST_TO_LAST_POSE. Overwritten by every successful estimate.
    last_pose: Optional[Pose3d] = None


class PoseEstimator(Sendable):
    """
    Filters or combines the AprilTags one camera sees in a frame into a single field-relative robot pose.

    How the tags are combined is chosen with a PoseStrategy, which may be switched between updates.
    The estimator is not thread-safe; it should be owned and updated by a single control loop.
    """

    def __init__(
        self,
        field_layout: FieldLayout,
        strategy: PoseStrategy,
        camera: Optional[CameraSource] = None,
        robot_to_camera: Transform3d = Transform3d(),
    ):
        """
        Construct a pose estimator.

        :param field_layout: Map of AprilTag IDs to their poses on the field, e.g. an AprilTagFieldLayout
        :param strategy: How to turn a frame of detections into a single pose
        :param camera: The camera to pull detections from when update() is called without a result
        :param robot_to_camera: Transform from the centre of the robot to the camera mount (robot -> camera)
        """

        super().__init__()

        if not isinstance(strategy, PoseStrategy):
            raise TypeError(f"Expected a PoseStrategy, got {strategy!r}")

        self._config = EstimatorConfig(field_layout, strategy, camera, robot_to_camera)

    def update(self, result: Optional[DetectionResult] = None) -> Optional[EstimatedRobotPose]:
        """
        Estimate the robot's pose from a frame of detections.

        :param result: Detections to process. If omitted, the latest unprocessed result is pulled from the camera.
        :return: The estimated pose and the timestamp of its frame, or None if no estimate could be made
        """

        if result is None:
            if self._config.camera is None:
                logger.warning("update() was called without a result on an estimator that has no camera")
                return None

            result = self._config.camera.latest_result()
            if result is None:
                # The camera has nothing new since the last update
                return None

        if not result.has_targets:
            return None

        estimate = self._estimate(result)

        if estimate is not None:
            self._config.last_pose = estimate.estimated_pose

        return estimate

    def _estimate(self, result: DetectionResult) -> Optional[EstimatedRobotPose]:
        strategy = self._config.strategy
        layout = self._config.field_layout
        robot_to_camera = self._config.robot_to_camera

        if strategy is PoseStrategy.LOWEST_AMBIGUITY:
            return strategies.lowest_ambiguity(result, layout, robot_to_camera)
        elif strategy is PoseStrategy.CLOSEST_TO_CAMERA_HEIGHT:
            return strategies.closest_to_camera_height(result, layout, robot_to_camera)
        elif strategy is PoseStrategy.CLOSEST_TO_REFERENCE_POSE:
            return self._closest_to(self._config.reference_pose, result, strategy)
        elif strategy is PoseStrategy.CLOSEST_TO_LAST_POSE:
            # Shares the reference pose routine but leaves reference_pose untouched
            return self._closest_to(self._config.last_pose, result, strategy)
        else:
            return strategies.average_best_targets(result, layout, robot_to_camera)

    def _closest_to(
        self, comparison_pose: Optional[Pose3d], result: DetectionResult, strategy: PoseStrategy
    ) -> Optional[EstimatedRobotPose]:
        if comparison_pose is None:
            logger.warning("%s needs a pose to compare against, but none has been set", strategy.name)
            return None

        return strategies.closest_to_pose(
            result, self._config.field_layout, self._config.robot_to_camera, comparison_pose, strategy
        )

    @property
    def field_layout(self) -> FieldLayout:
        """Map of AprilTag IDs to field poses"""
        return self._config.field_layout

    @property
    def camera(self) -> Optional[CameraSource]:
        return self._config.camera

    @property
    def strategy(self) -> PoseStrategy:
        """The strategy used by the next update. Changes take effect immediately."""
        return self._config.strategy

    @strategy.setter
    def strategy(self, strategy: PoseStrategy):
        if not isinstance(strategy, PoseStrategy):
            raise TypeError(f"Expected a PoseStrategy, got {strategy!r}")
        self._config.strategy = strategy

    @property
    def robot_to_camera(self) -> Transform3d:
        """
        Transform from the centre of the robot to the camera mount.
        Update it every loop for cameras on a turret or pan/tilt mechanism.
        """
        return self._config.robot_to_camera

    @robot_to_camera.setter
    def robot_to_camera(self, transform: Transform3d):
        self._config.robot_to_camera = transform

    @property
    def reference_pose(self) -> Optional[Pose3d]:
        """The pose CLOSEST_TO_REFERENCE_POSE compares against"""
        return self._config.reference_pose

    @reference_pose.setter
    def reference_pose(self, pose: Pose3d | Pose2d):
        self.set_reference_pose(pose)

    @property
    def last_pose(self) -> Optional[Pose3d]:
        """The most recent estimate, or the seed given to set_last_pose()"""
        return self._config.last_pose

    @singledispatchmethod
    def set_reference_pose(self, pose: Pose3d):
        """
        Update the pose used by the CLOSEST_TO_REFERENCE_POSE strategy

        :param pose: A field-relative pose, such as the robot's odometry. 2D poses are placed on the floor.
        """
        self._config.reference_pose = pose

    @set_reference_pose.register
    def _(self, pose: Pose2d):
        self.set_reference_pose(Pose3d(pose))

    @singledispatchmethod
    def set_last_pose(self, pose: Pose3d):
        """
        Seed the pose used by the CLOSEST_TO_LAST_POSE strategy before the first estimate is made

        :param pose: A field-relative pose. 2D poses are placed on the floor.
        """
        self._config.last_pose = pose

    @set_last_pose.register
    def _(self, pose: Pose2d):
        self.set_last_pose(Pose3d(pose))

    def initSendable(self, builder: SendableBuilder):
        builder.setSmartDashboardType("PoseEstimator")
        builder.addStringProperty("Strategy", lambda: self._config.strategy.name, lambda _: None)
        builder.addDoubleArrayProperty("Last Pose", lambda: _pose_to_array(self._config.last_pose), lambda _: None)
        builder.addDoubleArrayProperty(
            "Reference Pose", lambda: _pose_to_array(self._config.reference_pose), lambda _: None
        )


def _pose_to_array(pose: Optional[Pose3d]) -> list[float]:
    # Same layout AdvantageScope expects for a 3D pose: translation then quaternion (w, x, y, z)
    if pose is None:
        return []
    q = pose.rotation().getQuaternion()
    return [pose.X(), pose.Y(), pose.Z(), q.W(), q.X(), q.Y(), q.Z()]
