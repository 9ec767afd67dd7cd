"""The strategies that turn a frame of tag detections into a single robot pose"""

import enum
import logging
import math
from typing import Iterator, Optional, Protocol

from wpimath.geometry import Pose3d, Transform3d

from .geometry import (
    average_rotations,
    camera_pose_from_target,
    robot_pose_from_target,
    translation_distance,
    weighted_translation,
)
from .targets import DetectedTarget, DetectionResult, EstimatedRobotPose

logger = logging.getLogger(__name__)

# Lowest weight a target can have in AVERAGE_BEST_TARGETS, so a frame where every tag is maximally ambiguous
# still averages (with equal weights) instead of dividing by zero
MIN_TARGET_WEIGHT = 1e-6


class PoseStrategy(enum.Enum):
    LOWEST_AMBIGUITY = enum.auto()
    CLOSEST_TO_CAMERA_HEIGHT = enum.auto()
    CLOSEST_TO_REFERENCE_POSE = enum.auto()
    CLOSEST_TO_LAST_POSE = enum.auto()
    AVERAGE_BEST_TARGETS = enum.auto()


class FieldLayout(Protocol):
    """Anything that maps tag IDs to field poses, e.g. robotpy_apriltag.AprilTagFieldLayout"""

    def getTagPose(self, ID: int) -> Optional[Pose3d]: ...


def _resolvable_targets(
    result: DetectionResult, field_layout: FieldLayout
) -> Iterator[tuple[DetectedTarget, Pose3d]]:
    # Tags that aren't on the field map can't locate the robot, so they're dropped without failing the frame
    for target in result.targets:
        tag_pose = field_layout.getTagPose(target.fiducial_id)
        if tag_pose is None:
            logger.debug("Tag %d is not in the field layout, skipping", target.fiducial_id)
            continue
        yield target, tag_pose


def lowest_ambiguity(
    result: DetectionResult, field_layout: FieldLayout, robot_to_camera: Transform3d
) -> Optional[EstimatedRobotPose]:
    """
    Estimate the robot's pose from the single target with the lowest pose ambiguity.
    Ties go to the target listed first. Targets without a computed ambiguity (-1) are ignored,
    so a frame whose only mapped targets have no ambiguity yields no estimate.
    """
    best: Optional[tuple[DetectedTarget, Pose3d]] = None
    lowest = math.inf

    for target, tag_pose in _resolvable_targets(result, field_layout):
        ambiguity = target.pose_ambiguity
        if 0 <= ambiguity < lowest:
            lowest = ambiguity
            best = target, tag_pose

    if best is None:
        return None

    target, tag_pose = best
    return EstimatedRobotPose(
        robot_pose_from_target(tag_pose, target.best_camera_to_target, robot_to_camera),
        result.timestamp_seconds,
        (target,),
        PoseStrategy.LOWEST_AMBIGUITY,
    )


def closest_to_camera_height(
    result: DetectionResult, field_layout: FieldLayout, robot_to_camera: Transform3d
) -> Optional[EstimatedRobotPose]:
    """
    Estimate the robot's pose from the target solution that puts the camera closest to its real mounting height.

    A robot drives on the floor, so the camera should always sit robot_to_camera.Z() metres above the field.
    Both solutions of every target are tried; ties go to the one seen first.
    """
    smallest_difference = math.inf
    estimate: Optional[EstimatedRobotPose] = None

    for target, tag_pose in _resolvable_targets(result, field_layout):
        for camera_to_target in target.candidates:
            camera_pose = camera_pose_from_target(tag_pose, camera_to_target)
            difference = abs(camera_pose.Z() - robot_to_camera.Z())
            if difference < smallest_difference:
                smallest_difference = difference
                estimate = EstimatedRobotPose(
                    camera_pose.transformBy(robot_to_camera.inverse()),
                    result.timestamp_seconds,
                    (target,),
                    PoseStrategy.CLOSEST_TO_CAMERA_HEIGHT,
                )

    return estimate


def closest_to_pose(
    result: DetectionResult,
    field_layout: FieldLayout,
    robot_to_camera: Transform3d,
    comparison_pose: Pose3d,
    strategy: PoseStrategy = PoseStrategy.CLOSEST_TO_REFERENCE_POSE,
) -> Optional[EstimatedRobotPose]:
    """
    Estimate the robot's pose from the target solution that lands nearest to a known pose.

    Distance is the Euclidean distance between translations; rotation is not weighted.
    Both solutions of every target are tried; ties go to the one seen first.

    :param comparison_pose: The pose to compare against, e.g. the robot's odometry or the previous estimate
    :param strategy: Strategy recorded on the returned estimate
    """
    smallest_distance = math.inf
    estimate: Optional[EstimatedRobotPose] = None

    for target, tag_pose in _resolvable_targets(result, field_layout):
        for camera_to_target in target.candidates:
            candidate = robot_pose_from_target(tag_pose, camera_to_target, robot_to_camera)
            distance = translation_distance(candidate, comparison_pose)
            if distance < smallest_distance:
                smallest_distance = distance
                estimate = EstimatedRobotPose(candidate, result.timestamp_seconds, (target,), strategy)

    return estimate


def target_weight(ambiguity: float) -> float:
    """Confidence weight of a target: 1 - ambiguity, never below MIN_TARGET_WEIGHT"""
    ambiguity = min(max(ambiguity, 0.0), 1.0)
    return max(1.0 - ambiguity, MIN_TARGET_WEIGHT)


def average_best_targets(
    result: DetectionResult, field_layout: FieldLayout, robot_to_camera: Transform3d
) -> Optional[EstimatedRobotPose]:
    """
    Estimate the robot's pose as the confidence-weighted average of every target's best solution.
    """
    targets: list[DetectedTarget] = []
    poses: list[Pose3d] = []
    weights: list[float] = []

    for target, tag_pose in _resolvable_targets(result, field_layout):
        targets.append(target)
        poses.append(robot_pose_from_target(tag_pose, target.best_camera_to_target, robot_to_camera))
        weights.append(target_weight(target.pose_ambiguity))

    if not poses:
        return None

    if len(poses) == 1:
        pose = poses[0]
    else:
        pose = Pose3d(
            weighted_translation([p.translation() for p in poses], weights),
            average_rotations([p.rotation() for p in poses], weights),
        )

    return EstimatedRobotPose(pose, result.timestamp_seconds, tuple(targets), PoseStrategy.AVERAGE_BEST_TARGETS)
