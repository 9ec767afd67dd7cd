import math
from typing import Optional

import pytest
import robotpy_apriltag as apriltag
from wpimath.geometry import Pose3d, Rotation3d, Transform3d

from tagpose.targets import DetectedTarget, DetectionResult

# Tags used across the tests. Tag 99 is deliberately absent from the layout.
TAG_POSES = {
    1: Pose3d(0, 0, 0, Rotation3d()),
    2: Pose3d(2, 0, 0, Rotation3d()),
    3: Pose3d(4, 1, 0.6, Rotation3d()),
    4: Pose3d(6, 2, 3.0, Rotation3d()),
    5: Pose3d(2, 0, 0, Rotation3d(0, 0, math.pi / 2)),
}
UNMAPPED_TAG = 99


@pytest.fixture
def field_layout() -> apriltag.AprilTagFieldLayout:
    tags = []
    for id_, pose in TAG_POSES.items():
        tag = apriltag.AprilTag()
        tag.ID = id_
        tag.pose = pose
        tags.append(tag)
    return apriltag.AprilTagFieldLayout(tags, 16.54, 8.21)


@pytest.fixture
def make_target():
    def _make_target(
        fiducial_id: int,
        ambiguity: float = 0.1,
        best: Transform3d = Transform3d(),
        alternate: Optional[Transform3d] = None,
    ) -> DetectedTarget:
        return DetectedTarget(fiducial_id, ambiguity, best, alternate)

    return _make_target


@pytest.fixture
def make_result():
    def _make_result(*targets: DetectedTarget, timestamp: float = 1.5) -> DetectionResult:
        return DetectionResult(tuple(targets), timestamp)

    return _make_result
