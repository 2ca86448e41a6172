from types import SimpleNamespace

import pytest

from wastesnap import config
from wastesnap.detection.normalizer import normalize
from wastesnap.errors import UpstreamFailure
from wastesnap.gemini import detection
from wastesnap.models import Category


class FakeModels:
    def __init__(self, parts=None, error=None) -> None:
        self.parts = parts
        self.error = error
        self.requests = []

    def generate_content(self, model, contents):
        self.requests.append((model, contents))
        if self.error:
            raise self.error
        return SimpleNamespace(parts=self.parts)


def test_unconfigured_client_is_an_upstream_failure(monkeypatch) -> None:
    monkeypatch.setattr(config, "gemini_client", None)
    monkeypatch.setattr(config, "MOCK_DETECTIONS", False)
    with pytest.raises(UpstreamFailure):
        detection.detect_objects(b"img", "image/png")


def test_mock_mode_returns_sample_detections(monkeypatch) -> None:
    monkeypatch.setattr(config, "gemini_client", None)
    monkeypatch.setattr(config, "MOCK_DETECTIONS", True)

    detections = normalize(detection.detect_objects(b"img", "image/png"))

    assert len(detections) == 6
    bag = next(d for d in detections if d.label == "plastic bag")
    assert bag.category is Category.NON_RECYCLABLE
    assert bag.is_trash is True


def test_response_text_parts_are_concatenated(monkeypatch) -> None:
    models = FakeModels(parts=[SimpleNamespace(text='[{"label": '), SimpleNamespace(text=None),
                               SimpleNamespace(text='"can"}]')])
    monkeypatch.setattr(config, "gemini_client", SimpleNamespace(models=models))

    assert detection.detect_objects(b"img", "image/jpeg") == '[{"label": "can"}]'
    model, contents = models.requests[0]
    assert model == config.GEMINI_MODEL
    assert len(contents) == 2


def test_client_errors_become_upstream_failures(monkeypatch) -> None:
    models = FakeModels(error=RuntimeError("429 RESOURCE_EXHAUSTED"))
    monkeypatch.setattr(config, "gemini_client", SimpleNamespace(models=models))

    with pytest.raises(UpstreamFailure) as excinfo:
        detection.detect_objects(b"img", "image/jpeg")
    assert "RESOURCE_EXHAUSTED" in str(excinfo.value)


def test_prompt_asks_for_box_2d_array() -> None:
    prompt = detection.build_detection_prompt()
    assert "box_2d" in prompt
    assert "non_recyclable" in prompt
