"""Per-frame detection data handed out by camera sources and the estimates built from it"""

from dataclasses import dataclass, field
from typing import Optional, TYPE_CHECKING

from wpimath.geometry import Pose3d, Transform3d

if TYPE_CHECKING:
    from .strategies import PoseStrategy


@dataclass(frozen=True)
class DetectedTarget:
    """
    A single AprilTag seen by a camera.

    PhotonVision solves two camera-to-tag transforms for each tag because a lone square tag is ambiguous.
    The ambiguity is the ratio of the best solution's reprojection error to the alternate's, so lower is better.
    A value of -1 means the camera could not compute it.
    """

    fiducial_id: int
    pose_ambiguity: float
    best_camera_to_target: Transform3d
    alternate_camera_to_target: Optional[Transform3d] = None

    @property
    def candidates(self) -> tuple[Transform3d, ...]:
        """Camera-to-tag solutions in order of preference"""
        if self.alternate_camera_to_target is None:
            return (self.best_camera_to_target,)
        return self.best_camera_to_target, self.alternate_camera_to_target


@dataclass(frozen=True)
class DetectionResult:
    targets: tuple[DetectedTarget, ...]

    # Capture time in the same timebase as the robot's FPGA timestamp
    timestamp_seconds: float

    @property
    def has_targets(self) -> bool:
        return len(self.targets) > 0


@dataclass(frozen=True)
class EstimatedRobotPose:
    """A field-relative robot pose and the capture time of the frame it came from"""

    estimated_pose: Pose3d
    timestamp_seconds: float
    targets_used: tuple[DetectedTarget, ...] = field(default=())
    strategy: Optional["PoseStrategy"] = None
