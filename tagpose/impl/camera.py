import collections
import logging
import math
from typing import Optional, TYPE_CHECKING

from photonlibpy.photonCamera import PhotonCamera

if TYPE_CHECKING:
    from photonlibpy.targeting import PhotonTrackedTarget

from ..abstract.camera import CameraSource
from ..targets import DetectedTarget, DetectionResult

logger = logging.getLogger(__name__)


class PhotonCameraSource(CameraSource):
    def __init__(self, camera: PhotonCamera | str):
        """
        Camera source backed by a coprocessor running PhotonVision

        :param camera: A PhotonCamera, or the name of the camera as configured in the PhotonVision UI
        """

        if isinstance(camera, str):
            camera = PhotonCamera(camera)

        self._camera = camera
        self._last_timestamp = -math.inf

    @property
    def name(self) -> str:
        return self._camera.getName()

    def latest_result(self) -> Optional[DetectionResult]:
        # Drain everything received since the last call; only the newest frame is worth processing
        results = self._camera.getAllUnreadResults()
        if not results:
            return None

        newest = max(results, key=lambda result: result.getTimestampSeconds())
        timestamp = newest.getTimestampSeconds()

        # Guard against processing the same frame twice
        if timestamp <= self._last_timestamp:
            return None
        self._last_timestamp = timestamp

        targets = tuple(_to_detected_target(target) for target in newest.getTargets())
        logger.debug("%s: frame at %.3fs with %d targets", self.name, timestamp, len(targets))
        return DetectionResult(targets, timestamp)


def _to_detected_target(target: "PhotonTrackedTarget") -> DetectedTarget:
    return DetectedTarget(
        target.getFiducialId(),
        target.getPoseAmbiguity(),
        target.getBestCameraToTarget(),
        target.getAlternateCameraToTarget(),
    )


class DummyCameraSource(CameraSource):
    """Camera source that hands out results queued by the user. Useful in simulation and tests."""

    def __init__(self, *results: DetectionResult):
        self._results = collections.deque(results)

    def queue(self, result: DetectionResult):
        self._results.append(result)

    def latest_result(self) -> Optional[DetectionResult]:
        if not self._results:
            return None
        return self._results.popleft()
