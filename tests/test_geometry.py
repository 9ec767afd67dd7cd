import math

import pytest
from wpimath.geometry import Pose3d, Quaternion, Rotation3d, Transform3d, Translation3d

from tagpose.geometry import (
    average_rotations,
    camera_pose_from_target,
    robot_pose_from_target,
    translation_distance,
    weighted_translation,
)


def test_camera_pose_from_facing_tag():
    # The camera looks back down the X-axis at a tag one metre in front of it
    tag_pose = Pose3d(2, 0, 0, Rotation3d())
    camera_to_target = Transform3d(Translation3d(1, 0, 0), Rotation3d(0, 0, math.pi))

    assert camera_pose_from_target(tag_pose, camera_to_target) == Pose3d(3, 0, 0, Rotation3d(0, 0, math.pi))


def test_robot_pose_from_target_removes_rotated_mount():
    tag_pose = Pose3d(2, 0, 0, Rotation3d())
    camera_to_target = Transform3d(Translation3d(1, 0, 0), Rotation3d(0, 0, math.pi))
    # Camera faces backwards off the rear of the robot
    robot_to_camera = Transform3d(Translation3d(-0.5, 0, 0), Rotation3d(0, 0, math.pi))

    assert robot_pose_from_target(tag_pose, camera_to_target, robot_to_camera) == Pose3d(3.5, 0, 0, Rotation3d())


def test_translation_distance_ignores_rotation():
    a = Pose3d(0, 0, 0, Rotation3d(0, 0, 1))
    b = Pose3d(3, 4, 0, Rotation3d())

    assert translation_distance(a, b) == pytest.approx(5.0)


def test_weighted_translation():
    translations = [Translation3d(0, 0, 0), Translation3d(4, 2, 1)]

    mean = weighted_translation(translations, [3, 1])

    assert (mean.X(), mean.Y(), mean.Z()) == pytest.approx((1.0, 0.5, 0.25))


def test_average_rotations_ignores_quaternion_sign():
    yaw = Rotation3d(0, 0, 0.5)
    q = yaw.getQuaternion()
    flipped = Rotation3d(Quaternion(-q.W(), -q.X(), -q.Y(), -q.Z()))

    assert average_rotations([yaw, flipped], [1, 1]) == yaw


def test_average_rotations_of_one_rotation():
    rotation = Rotation3d(0.1, -0.2, 2.5)

    assert average_rotations([rotation], [0.4]) == rotation
