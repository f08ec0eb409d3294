"""
Keyword fallback over cached document previews.

Only used when vector search returns nothing. It is deliberately crude:
documents are ranked by how much snippet text they produced, with no
normalization for document size or keyword frequency.
"""
import re
from typing import Dict, List

from docqa.models.query import ContextPassage, PreviewEntry

STOP_WORDS = frozenset([
    "the", "a", "an", "and", "or", "of", "to", "in", "for", "on", "with", "at", "by",
    "from", "as", "is", "are", "was", "were", "be", "been", "it", "this", "that",
    "these", "those", "i", "you", "we", "they", "he", "she",
])

_TOKEN = re.compile(r"[a-z0-9]{3,}")

MAX_HITS_PER_KEYWORD = 2
MAX_SNIPPETS_PER_DOC = 3

def keywordize(question: str) -> List[str]:
    return [w for w in _TOKEN.findall(question.lower()) if w not in STOP_WORDS]

def extract_snippets(text: str, keyword: str, span: int = 160) -> List[str]:
    lowered = text.lower()
    kw = keyword.lower()
    out = []
    i = lowered.find(kw)
    while i != -1 and len(out) < MAX_HITS_PER_KEYWORD:
        start = max(0, i - span)
        end = min(len(text), i + len(kw) + span)
        out.append(text[start:end])
        i = lowered.find(kw, i + len(kw))
    return out

def lexical_search(question: str, previews: List[PreviewEntry], span: int = 160, limit: int = 5) -> List[ContextPassage]:
    keywords = keywordize(question)
    candidates = []
    for entry in previews:
        hits = 0
        snippets: Dict[str, None] = {}
        for kw in keywords:
            for snippet in extract_snippets(entry.preview, kw, span):
                snippets[snippet] = None
                hits += 1
        if hits > 0:
            text = "\n".join(list(snippets)[:MAX_SNIPPETS_PER_DOC])
            candidates.append((entry, text))

    candidates.sort(key=lambda c: len(c[1]), reverse=True)
    return [
        ContextPassage(id=f"lex-{i}", doc_id=entry.doc_id, doc_name=entry.doc_name, order=i, text=text)
        for i, (entry, text) in enumerate(candidates[:limit])
    ]
