import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import Field

from docqa.dependencies import AppServices, get_services
from docqa.errors import InputValidationError, QueryTimeoutError
from docqa.models.query import CamelModel, DistanceMeasure, QueryResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Query"])

class QueryRequest(CamelModel):
    question: Optional[str] = None
    k: Optional[int] = Field(default=None, ge=1, le=100)
    distance_measure: Optional[DistanceMeasure] = None

async def answer_question(services: AppServices, question: str, k: Optional[int], measure: Optional[DistanceMeasure]) -> QueryResult:
    # 1. Retrieval (vector, then lexical fallback)
    retrieval = await services.search.retrieve(question, k=k, measure=measure)
    logger.info(f"Retrieved {len(retrieval.contexts)} contexts via {retrieval.source}")

    # 2. Answer + completeness judgment
    return await services.answers.answer(question, retrieval.contexts)

@router.post("/query", response_model=QueryResult)
async def query(request: QueryRequest, services: AppServices = Depends(get_services)):
    question = (request.question or "").strip()
    if not question:
        raise InputValidationError("Missing question")

    try:
        return await asyncio.wait_for(
            answer_question(services, question, request.k, request.distance_measure),
            timeout=services.settings.QUERY_TIMEOUT_SECONDS
        )
    except asyncio.TimeoutError:
        raise QueryTimeoutError(f"Query did not finish within {services.settings.QUERY_TIMEOUT_SECONDS:g}s")
