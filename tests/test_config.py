"""
Tests for settings validation and store helpers
"""
import pytest
from pydantic import ValidationError

from conftest import make_settings
from docqa.db.mongo import vector_index_name
from docqa.db.store import build_vector_search_pipeline, to_object_id
from docqa.models.query import DistanceMeasure


def test_defaults(settings):
    assert settings.CHUNK_TARGET_CHARS == 1000
    assert settings.CHUNK_OVERLAP_CHARS == 200
    assert settings.MAX_CHUNK_CHARS == 700
    assert settings.INDEX_BATCH_SIZE == 50
    assert settings.DELETE_BATCH_SIZE == 450
    assert settings.MAX_UPLOAD_BYTES == 1024 * 1024
    assert settings.MAX_TEXT_CHARS == 900_000
    assert settings.TOP_K == 8
    assert settings.DISTANCE_MEASURE == "COSINE"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("TOP_K", "3")
    monkeypatch.setenv("LLM_MODEL", "gpt-4o-mini")
    settings = make_settings()
    assert settings.TOP_K == 3
    assert settings.LLM_MODEL == "gpt-4o-mini"


def test_overlap_must_be_smaller_than_target():
    with pytest.raises(ValidationError):
        make_settings(CHUNK_TARGET_CHARS=200, CHUNK_OVERLAP_CHARS=200)


def test_unknown_distance_measure_rejected():
    with pytest.raises(ValidationError):
        make_settings(DISTANCE_MEASURE="MANHATTAN")


def test_vector_index_name_per_metric():
    assert vector_index_name("vector_index", DistanceMeasure.COSINE) == "vector_index_cosine"
    assert vector_index_name("vi", DistanceMeasure.DOT_PRODUCT) == "vi_dot_product"
    assert DistanceMeasure.DOT_PRODUCT.similarity == "dotProduct"


def test_vector_search_pipeline():
    pipeline = build_vector_search_pipeline([0.1, 0.2], 8, "vector_index_cosine", 100)

    stage = pipeline[0]["$vectorSearch"]
    assert stage["index"] == "vector_index_cosine"
    assert stage["limit"] == 8
    assert stage["numCandidates"] == 100
    assert stage["queryVector"] == [0.1, 0.2]
    assert pipeline[1]["$project"]["score"] == {"$meta": "vectorSearchScore"}


def test_num_candidates_never_below_k():
    pipeline = build_vector_search_pipeline([0.1], 250, "idx", 100)
    assert pipeline[0]["$vectorSearch"]["numCandidates"] == 250


def test_to_object_id():
    assert to_object_id("not-an-id") is None
    assert str(to_object_id("65f1c0ffee00000000000001")) == "65f1c0ffee00000000000001"
