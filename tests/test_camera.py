from unittest.mock import MagicMock, patch

from wpimath.geometry import Rotation3d, Transform3d, Translation3d

from tagpose.impl import DummyCameraSource, PhotonCameraSource
from tagpose.targets import DetectedTarget, DetectionResult


def _photon_target(fiducial_id, ambiguity, best, alternate):
    target = MagicMock()
    target.getFiducialId.return_value = fiducial_id
    target.getPoseAmbiguity.return_value = ambiguity
    target.getBestCameraToTarget.return_value = best
    target.getAlternateCameraToTarget.return_value = alternate
    return target


def _photon_result(timestamp, targets=()):
    result = MagicMock()
    result.getTimestampSeconds.return_value = timestamp
    result.getTargets.return_value = list(targets)
    return result


def test_photon_source_converts_newest_result():
    best = Transform3d(Translation3d(2, 0, 0), Rotation3d())
    alternate = Transform3d(Translation3d(2, 0.1, 0), Rotation3d())
    camera = MagicMock()
    camera.getAllUnreadResults.return_value = [
        _photon_result(1.0),
        _photon_result(1.2, [_photon_target(7, 0.15, best, alternate)]),
    ]

    result = PhotonCameraSource(camera).latest_result()

    assert result == DetectionResult((DetectedTarget(7, 0.15, best, alternate),), 1.2)
    assert result.targets[0].candidates == (best, alternate)


def test_photon_source_reports_nothing_new():
    camera = MagicMock()
    source = PhotonCameraSource(camera)

    camera.getAllUnreadResults.return_value = []
    assert source.latest_result() is None

    camera.getAllUnreadResults.return_value = [_photon_result(2.0)]
    assert source.latest_result() == DetectionResult((), 2.0)

    # A stale frame is not handed out twice
    assert source.latest_result() is None


@patch("tagpose.impl.camera.PhotonCamera")
def test_photon_source_from_name(mock_camera_class):
    mock_camera_class.return_value.getName.return_value = "front"

    source = PhotonCameraSource("front")

    mock_camera_class.assert_called_once_with("front")
    assert source.name == "front"


def test_dummy_source_hands_out_queued_results():
    first = DetectionResult((), 0.5)
    second = DetectionResult((), 0.7)
    source = DummyCameraSource(first)
    source.queue(second)

    assert source.latest_result() is first
    assert source.latest_result() is second
    assert source.latest_result() is None
