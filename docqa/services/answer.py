import logging
from typing import Any, List

from docqa.errors import UpstreamServiceError
from docqa.models.query import Completeness, ContextPassage, QueryResult
from docqa.services.llm import LLMService

logger = logging.getLogger(__name__)

NO_CONTEXT_ANSWER = "I couldn't find relevant information in your documents."
NO_CONTEXT_SCORE = 0.2
NO_CONTEXT_REASONS = ["No matching content found"]
NO_CONTEXT_MISSING = [
    "Upload .txt documents that contain the information you're asking for",
    "Ask a more specific question using terms present in your files",
]

DEFAULT_SCORE = 0.7

ANSWER_PROMPT = """
Answer the question strictly from the context. Use inline citations like [#n].

Question:
{question}

Context:
{context}
"""

JUDGE_PROMPT = """
Return JSON {{"score":0..1,"missing":["..."],"reasons":["..."]}} judging completeness.

Question: {question}
Answer: {answer}
ContextChunks: {count}
"""

def build_context_block(contexts: List[ContextPassage]) -> str:
    return "\n\n".join(f"[#{i + 1}] ({c.doc_name}) {c.text}" for i, c in enumerate(contexts))

def parse_judgment(raw: Any) -> Completeness:
    """
    Turn whatever the judge returned into a Completeness, keeping the
    defaults for any field that is missing or the wrong shape.
    """
    completeness = Completeness(score=DEFAULT_SCORE)
    if not isinstance(raw, dict):
        return completeness

    score = raw.get("score")
    if isinstance(score, (int, float)) and not isinstance(score, bool) and score == score:
        completeness.score = max(0.0, min(1.0, float(score)))
    if isinstance(raw.get("missing"), list):
        completeness.missing = [str(m) for m in raw["missing"]]
    if isinstance(raw.get("reasons"), list):
        completeness.reasons = [str(r) for r in raw["reasons"]]
    return completeness

def no_context_result() -> QueryResult:
    return QueryResult(
        answer=NO_CONTEXT_ANSWER,
        contexts=[],
        completeness=Completeness(
            score=NO_CONTEXT_SCORE,
            reasons=list(NO_CONTEXT_REASONS),
            missing=list(NO_CONTEXT_MISSING)
        )
    )

class AnswerService:
    def __init__(self, llm: LLMService):
        self.llm = llm

    async def answer(self, question: str, contexts: List[ContextPassage]) -> QueryResult:
        if not contexts:
            return no_context_result()

        # Answer failures propagate: the answer is what the caller asked for
        prompt = ANSWER_PROMPT.format(question=question, context=build_context_block(contexts))
        answer_text = await self.llm.get_response(prompt)
        if not answer_text.strip():
            raise UpstreamServiceError("Completion returned an empty answer")

        completeness = await self.judge(question, answer_text, len(contexts))
        return QueryResult(answer=answer_text, contexts=contexts, completeness=completeness)

    async def judge(self, question: str, answer_text: str, count: int) -> Completeness:
        prompt = JUDGE_PROMPT.format(question=question, answer=answer_text, count=count)
        try:
            raw = await self.llm.get_json(prompt)
        except Exception:
            logger.warning("Completeness judge failed, using defaults", exc_info=True)
            return Completeness(score=DEFAULT_SCORE)
        return parse_judgment(raw)
