"""
Tests for the retrieval orchestrator
"""
import pytest

from docqa.models.query import DistanceMeasure
from docqa.retrieval.lexical import lexical_search
from docqa.retrieval.service import SearchService


async def seed(store, embedder, name, texts, preview=None):
    doc = await store.create_document(name, 100)
    await store.store_original_text(doc.id, preview or " ".join(texts), 1000, 1000)
    await store.commit_chunks([
        {"doc_id": doc.id, "page": 0, "order": i, "text": t, "embedding": await embedder.embed_document(t)}
        for i, t in enumerate(texts)
    ])
    return doc


@pytest.mark.asyncio
async def test_vector_hits_get_document_names(settings, store, embedder):
    paris = await seed(store, embedder, "paris.txt", ["Paris is the capital of France", "The Eiffel Tower is in Paris"])
    await seed(store, embedder, "rome.txt", ["Rome is the capital of Italy"])
    service = SearchService(store, embedder, settings)

    result = await service.retrieve("capital of France", k=3)

    assert result.source == "vector"
    assert len(result.contexts) == 3
    top = result.contexts[0]
    assert top.doc_id == paris.id
    assert top.doc_name == "paris.txt"
    assert top.text == "Paris is the capital of France"
    assert top.order == 0
    # one lookup, one entry per distinct document
    assert len(store.name_lookups) == 1
    assert sorted(store.name_lookups[0]) == sorted({c.doc_id for c in result.contexts})


@pytest.mark.asyncio
async def test_missing_document_name_falls_back_to_id(settings, store, embedder):
    await store.commit_chunks([{"doc_id": "orphan", "page": 0, "order": 4, "text": "orphaned chunk",
                                "embedding": await embedder.embed_document("orphaned chunk")}])
    service = SearchService(store, embedder, settings)

    result = await service.retrieve("orphaned")

    assert result.contexts[0].doc_name == "orphan"
    assert result.contexts[0].order == 4


@pytest.mark.asyncio
async def test_empty_vector_index_uses_lexical_only(settings, store, embedder):
    await seed(store, embedder, "paris.txt", ["irrelevant"], preview="Paris is the capital of France.")
    await seed(store, embedder, "notes.txt", ["irrelevant"], preview="Shopping list: eggs, milk.")
    store.vector_search_enabled = False
    service = SearchService(store, embedder, settings)

    result = await service.retrieve("What is the capital of France?")

    expected = lexical_search("What is the capital of France?", await store.list_previews())
    assert result.source == "lexical"
    assert result.contexts == expected
    assert all(c.id.startswith("lex-") for c in result.contexts)
    assert [c.doc_name for c in result.contexts] == ["paris.txt"]
    assert store.name_lookups == []


@pytest.mark.asyncio
async def test_nothing_found_is_empty_not_error(settings, store, embedder):
    service = SearchService(store, embedder, settings)

    result = await service.retrieve("anything at all?")

    assert result.contexts == []
    assert result.source == "none"


@pytest.mark.asyncio
async def test_defaults_from_settings(settings, store, embedder):
    seen = {}

    async def spy(vector, k, measure):
        seen.update(k=k, measure=measure)
        return []

    store.vector_search = spy
    service = SearchService(store, embedder, settings)

    await service.retrieve("question")
    assert seen == {"k": settings.TOP_K, "measure": DistanceMeasure.COSINE}

    await service.retrieve("question", k=3, measure=DistanceMeasure.DOT_PRODUCT)
    assert seen == {"k": 3, "measure": DistanceMeasure.DOT_PRODUCT}
