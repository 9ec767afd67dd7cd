from abc import ABC, abstractmethod
from typing import Optional

from ..targets import DetectionResult


class CameraSource(ABC):
    @abstractmethod
    def latest_result(self) -> Optional[DetectionResult]:
        """
        The newest frame of AprilTag detections the estimator hasn't seen yet

        :return: The detections, or None if no new frame has arrived since the last call
        """
        raise NotImplementedError
