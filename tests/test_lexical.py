"""
Tests for the keyword fallback over document previews
"""
from docqa.models.query import PreviewEntry
from docqa.retrieval.lexical import extract_snippets, keywordize, lexical_search

FILLER = "lorem ipsum dolor sit amet " * 20  # 540 chars, wider than two spans


def entry(doc_id, preview, name=None):
    return PreviewEntry(doc_id=doc_id, doc_name=name or f"{doc_id}.txt", preview=preview)


def test_keywordize_drops_short_tokens_and_stop_words():
    assert keywordize("What is the capital of France, in 2024?") == ["what", "capital", "france", "2024"]


def test_keywordize_empty_question():
    assert keywordize("a an it") == []


def test_snippet_window_clipped_to_text_bounds():
    text = "start " + "x" * 400 + " Eiffel " + "y" * 400
    snippets = extract_snippets(text, "eiffel", span=160)

    assert len(snippets) == 1
    assert snippets[0] == text[407 - 160:407 + len("eiffel") + 160]
    assert extract_snippets("Eiffel", "eiffel") == ["Eiffel"]


def test_at_most_two_occurrences_per_keyword():
    preview = FILLER.join(["Eiffel tower"] * 3)
    snippets = extract_snippets(preview, "eiffel")

    assert len(snippets) == 2

    results = lexical_search("eiffel", [entry("d1", preview)])
    assert len(results) == 1
    assert results[0].text.count("Eiffel") == 2


def test_documents_without_hits_excluded():
    results = lexical_search("volcano eruption", [entry("d1", "calm lake"), entry("d2", "a volcano erupted")])

    assert [r.doc_id for r in results] == ["d2"]


def test_ranked_by_snippet_length_and_capped():
    previews = [entry(f"d{i}", "kiwi " + "z" * (10 * i)) for i in range(7)]

    results = lexical_search("kiwi", previews)

    assert len(results) == 5
    assert [r.doc_id for r in results] == ["d6", "d5", "d4", "d3", "d2"]
    assert [r.id for r in results] == ["lex-0", "lex-1", "lex-2", "lex-3", "lex-4"]
    assert [r.order for r in results] == [0, 1, 2, 3, 4]
    assert results[0].doc_name == "d6.txt"


def test_at_most_three_snippets_joined():
    preview = FILLER.join(["alpha beta", "alpha", "beta", "gamma"])

    results = lexical_search("alpha beta gamma", [entry("d1", preview)])

    snippets = results[0].text.split("\n")
    assert len(snippets) == 3
    assert len(set(snippets)) == 3


def test_no_keywords_no_results():
    assert lexical_search("is it", [entry("d1", "it is what it is")]) == []


def test_duplicate_windows_collapsed():
    results = lexical_search("kiwi kiwi", [entry("d1", "kiwi pie")])

    assert results[0].text == "kiwi pie"
