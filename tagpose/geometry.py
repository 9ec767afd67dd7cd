"""
A collection of pose composition and averaging helpers used by the estimation strategies.
"""

from typing import Sequence

import numpy as np
from wpimath.geometry import Pose3d, Quaternion, Rotation3d, Transform3d, Translation3d


def camera_pose_from_target(tag_pose: Pose3d, camera_to_target: Transform3d) -> Pose3d:
    """
    Locate the camera on the field by walking backwards from a tag with a known pose.

    :param tag_pose: Field-relative pose of the tag
    :param camera_to_target: Transform from the camera to the tag, as measured by the camera
    :return: Field-relative pose of the camera
    """
    return tag_pose.transformBy(camera_to_target.inverse())


def robot_pose_from_target(tag_pose: Pose3d, camera_to_target: Transform3d, robot_to_camera: Transform3d) -> Pose3d:
    """
    Locate the robot on the field from a single tag measurement.

    :param tag_pose: Field-relative pose of the tag
    :param camera_to_target: Transform from the camera to the tag, as measured by the camera
    :param robot_to_camera: Transform from the robot's centre to the camera mount (robot -> camera)
    :return: Field-relative pose of the robot
    """
    return camera_pose_from_target(tag_pose, camera_to_target).transformBy(robot_to_camera.inverse())


def translation_distance(a: Pose3d, b: Pose3d) -> float:
    """Straight-line distance between two poses in metres. Rotation is not considered."""
    return a.translation().distance(b.translation())


def weighted_translation(translations: Sequence[Translation3d], weights: Sequence[float]) -> Translation3d:
    """Per-axis weighted arithmetic mean of translations"""
    total = sum(weights)
    x = sum(t.X() * w for t, w in zip(translations, weights)) / total
    y = sum(t.Y() * w for t, w in zip(translations, weights)) / total
    z = sum(t.Z() * w for t, w in zip(translations, weights)) / total
    return Translation3d(x, y, z)


def average_rotations(rotations: Sequence[Rotation3d], weights: Sequence[float]) -> Rotation3d:
    """
    Weighted average of 3D rotations.

    The average quaternion is the eigenvector with the largest eigenvalue of sum(w * q * q^T)
    (Markley et al., "Averaging Quaternions", 2007). Since q and -q contribute the same outer product,
    the result does not depend on which hemisphere each quaternion was reported in or on input order.

    :param rotations: Rotations to average
    :param weights: Non-negative weight for each rotation
    :return: The average rotation
    """
    accumulator = np.zeros((4, 4))
    for rotation, weight in zip(rotations, weights):
        q = rotation.getQuaternion()
        v = np.array([q.W(), q.X(), q.Y(), q.Z()])
        accumulator += weight * np.outer(v, v)

    # eigh returns eigenvalues in ascending order
    _, eigenvectors = np.linalg.eigh(accumulator)
    w, x, y, z = eigenvectors[:, -1]

    # Keep a canonical sign so equal inputs give bitwise-equal outputs
    if w < 0:
        w, x, y, z = -w, -x, -y, -z

    return Rotation3d(Quaternion(float(w), float(x), float(y), float(z)))

