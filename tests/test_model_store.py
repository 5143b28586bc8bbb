"""
Unit tests for fakefinder/services/model_store.py.

Redis is either absent (memory fallback) or the in-memory MockRedis.
Simulated training and testing waits are zeroed.
"""

import asyncio
import json

import pytest
from pydantic import ValidationError

from fakefinder.schemas.detection import ContentType
from fakefinder.schemas.models import ModelState
from fakefinder.services import model_store
from fakefinder.services.model_store import ModelBusyError
from tests.mocks.score_provider_mock import FixedScoreProvider


@pytest.fixture(autouse=True)
def instant_training(monkeypatch):
    from fakefinder.config import settings

    monkeypatch.setattr(settings, "training_duration_sec", 0)
    monkeypatch.setattr(settings, "testing_duration_sec", 0)


# ---------------------------------------------------------------------------
# Defaults and persistence
# ---------------------------------------------------------------------------


def test_default_states():
    states = model_store.get_all_model_states()
    assert set(states) == set(ContentType)
    assert states[ContentType.IMAGE].accuracy == 0.82
    assert states[ContentType.VIDEO].accuracy == 0.79
    assert states[ContentType.AUDIO].accuracy == 0.75
    assert states[ContentType.TEXT].accuracy == 0.85
    assert all(not s.is_custom_trained and s.model_version == "default-v1" for s in states.values())


def test_update_is_kept_in_memory_without_redis():
    model_store.update_model_state(ContentType.AUDIO, accuracy=0.7)
    assert model_store.get_model_state(ContentType.AUDIO).accuracy == 0.7


def test_update_is_written_to_redis(mock_redis):
    model_store.update_model_state(ContentType.IMAGE, accuracy=0.81)
    stored = json.loads(mock_redis.get("model_state:image"))
    assert stored["accuracy"] == 0.81


def test_invalid_stored_state_is_ignored(mock_redis):
    mock_redis.set("model_state:video", json.dumps({"is_custom_trained": False, "datasets": ["x"]}))
    state = model_store.get_model_state(ContentType.VIDEO)
    assert state.datasets == []
    assert state.accuracy == 0.79


def test_redis_failure_falls_back_to_memory(mock_redis):
    model_store.update_model_state(ContentType.TEXT, accuracy=0.6)
    mock_redis.fail = True
    assert model_store.get_model_state(ContentType.TEXT).accuracy == 0.6


def test_update_that_breaks_invariant_is_rejected():
    with pytest.raises(ValidationError):
        model_store.update_model_state(ContentType.IMAGE, datasets=["cifake-real-vs-ai"])


def test_default_model_cannot_carry_custom_version():
    with pytest.raises(ValidationError):
        ModelState(model_version="custom-v1")


# ---------------------------------------------------------------------------
# Versioning and datasets
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "current, expected",
    [
        ("custom-v3", "custom-v4"),
        ("customv7", "custom-v8"),
        ("default-v1", "custom-v1"),
        ("sdxl-detector-v2", "custom-v1"),
        ("", "custom-v1"),
    ],
)
def test_next_custom_version(current, expected):
    assert model_store.next_custom_version(current) == expected


def test_available_datasets_per_type():
    for content_type in ContentType:
        assert model_store.get_available_datasets(content_type)
    assert "asvspoof-2019-la" in model_store.get_available_datasets(ContentType.AUDIO)


# ---------------------------------------------------------------------------
# Training
# ---------------------------------------------------------------------------


async def test_train_model_produces_custom_model():
    report = await model_store.train_model(ContentType.IMAGE, "cifake-real-vs-ai", 10, FixedScoreProvider(0.5))

    assert report.accuracy == pytest.approx(0.85 + 0.05 + 0.01)
    assert report.model_version == "custom-v1"
    assert 0 < report.f1_score < 1

    state = model_store.get_model_state(ContentType.IMAGE)
    assert state.is_custom_trained is True
    assert state.is_training is False
    assert state.model_version == "custom-v1"
    assert state.datasets == ["cifake-real-vs-ai"]
    assert state.last_trained_at is not None


async def test_training_again_bumps_version_and_keeps_datasets_unique():
    provider = FixedScoreProvider(0.5)
    await model_store.train_model(ContentType.VIDEO, "celeb-df-v2", 5, provider)
    await model_store.train_model(ContentType.VIDEO, "celeb-df-v2", 5, provider)
    report = await model_store.train_model(ContentType.VIDEO, "dfdc-preview", 5, provider)

    state = model_store.get_model_state(ContentType.VIDEO)
    assert report.model_version == "custom-v3"
    assert state.datasets == ["celeb-df-v2", "dfdc-preview"]


async def test_training_accuracy_is_capped():
    report = await model_store.train_model(ContentType.TEXT, "hc3-human-chatgpt", 100, FixedScoreProvider(1.0))
    assert report.accuracy == 0.99


async def test_training_while_busy_is_rejected():
    model_store.update_model_state(ContentType.AUDIO, is_training=True)
    with pytest.raises(ModelBusyError):
        await model_store.train_model(ContentType.AUDIO, "wavefake", 5, FixedScoreProvider())


async def test_invalid_epochs_are_rejected():
    with pytest.raises(ValueError):
        await model_store.train_model(ContentType.AUDIO, "wavefake", 0, FixedScoreProvider())
    assert model_store.get_model_state(ContentType.AUDIO).is_training is False


# ---------------------------------------------------------------------------
# Testing, download, reset
# ---------------------------------------------------------------------------


async def test_testing_default_model_leaves_accuracy_alone():
    report = await model_store.test_model(ContentType.IMAGE, "coco-2017-real", FixedScoreProvider(0.5), samples=40)

    matrix = report.confusion_matrix
    assert report.samples == 40
    assert sum(matrix.model_dump().values()) == 40
    assert report.accuracy == pytest.approx((matrix.true_positives + matrix.true_negatives) / 40)
    assert model_store.get_model_state(ContentType.IMAGE).accuracy == 0.82


async def test_testing_custom_model_updates_accuracy():
    await model_store.train_model(ContentType.IMAGE, "cifake-real-vs-ai", 10, FixedScoreProvider(0.5))
    report = await model_store.test_model(ContentType.IMAGE, "coco-2017-real", FixedScoreProvider(1.0), samples=100)

    state = model_store.get_model_state(ContentType.IMAGE)
    assert state.accuracy == pytest.approx(report.accuracy)
    assert state.is_training is False


async def test_download_installs_specialized_model():
    state = await model_store.download_pretrained_model(ContentType.AUDIO)

    assert state.is_custom_trained is True
    assert state.model_version == "wavlm-spoof-v2"
    assert state.accuracy == 0.93
    assert state.is_training is False
    assert state.datasets == ["asvspoof-2019-la"]


async def test_reset_restores_default():
    await model_store.download_pretrained_model(ContentType.TEXT)
    state = model_store.reset_model(ContentType.TEXT)

    assert state == model_store.default_model_state(ContentType.TEXT)
    assert model_store.get_model_state(ContentType.TEXT).is_custom_trained is False


async def test_reset_during_running_operation_is_rejected(monkeypatch):
    from fakefinder.config import settings

    monkeypatch.setattr(settings, "training_duration_sec", 0.05)
    task = asyncio.create_task(model_store.train_model(ContentType.VIDEO, "celeb-df-v2", 5, FixedScoreProvider()))
    while not model_store.get_model_state(ContentType.VIDEO).is_training:
        await asyncio.sleep(0.001)

    with pytest.raises(ModelBusyError):
        model_store.reset_model(ContentType.VIDEO)

    await task
    assert model_store.get_model_state(ContentType.VIDEO).is_training is False


async def test_concurrent_operations_on_one_type_are_rejected(monkeypatch):
    from fakefinder.config import settings

    monkeypatch.setattr(settings, "training_duration_sec", 0.05)
    first = asyncio.create_task(model_store.download_pretrained_model(ContentType.IMAGE))
    await asyncio.sleep(0)

    with pytest.raises(ModelBusyError):
        await model_store.train_model(ContentType.IMAGE, "cifake-real-vs-ai", 5, FixedScoreProvider())

    state = await first
    assert state.model_version == "sdxl-detector-v2"


# ---------------------------------------------------------------------------
# Stale training flags
# ---------------------------------------------------------------------------


def test_reset_clears_stale_training_flag():
    model_store.update_model_state(ContentType.VIDEO, is_training=True)

    state = model_store.reset_model(ContentType.VIDEO)

    assert state.is_training is False
    assert model_store.get_model_state(ContentType.VIDEO).is_training is False


def test_clear_stale_training_flags(mock_redis):
    stale = ModelState(is_training=True, accuracy=0.79)
    mock_redis.set("model_state:video", stale.model_dump_json())
    mock_redis.set("model_state:text", stale.model_dump_json())

    cleared = model_store.clear_stale_training_flags()

    assert set(cleared) == {ContentType.VIDEO, ContentType.TEXT}
    assert json.loads(mock_redis.get("model_state:video"))["is_training"] is False
    assert model_store.get_model_state(ContentType.TEXT).accuracy == 0.79


async def test_operations_run_after_stale_flag_is_cleared(mock_redis):
    mock_redis.set("model_state:audio", ModelState(is_training=True, accuracy=0.75).model_dump_json())
    with pytest.raises(ModelBusyError):
        await model_store.train_model(ContentType.AUDIO, "wavefake", 5, FixedScoreProvider())

    model_store.clear_stale_training_flags()
    report = await model_store.train_model(ContentType.AUDIO, "wavefake", 5, FixedScoreProvider())

    assert report.model_version == "custom-v1"


async def test_store_calls_leave_the_event_loop(monkeypatch):
    calls = []
    real_to_thread = asyncio.to_thread

    async def recording_to_thread(func, *args, **kwargs):
        calls.append(func.__name__)
        return await real_to_thread(func, *args, **kwargs)

    monkeypatch.setattr(model_store.asyncio, "to_thread", recording_to_thread)
    await model_store.train_model(ContentType.TEXT, "hc3-human-chatgpt", 5, FixedScoreProvider())
    await model_store.test_model(ContentType.TEXT, "hc3-human-chatgpt", FixedScoreProvider(), samples=10)
    await model_store.download_pretrained_model(ContentType.TEXT)

    assert calls.count("_mark_training") == 3
    assert "get_model_state" in calls
    assert calls.count("update_model_state") >= 6
