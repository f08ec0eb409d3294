from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DistanceMeasure(str, Enum):
    COSINE = "COSINE"
    EUCLIDEAN = "EUCLIDEAN"
    DOT_PRODUCT = "DOT_PRODUCT"

    @property
    def similarity(self) -> str:
        """Name Atlas Vector Search uses for this metric."""
        return {
            DistanceMeasure.COSINE: "cosine",
            DistanceMeasure.EUCLIDEAN: "euclidean",
            DistanceMeasure.DOT_PRODUCT: "dotProduct",
        }[self]


class SearchHit(BaseModel):
    chunk_id: str
    doc_id: str
    order: Optional[int] = None
    text: str
    score: float = 0.0


class PreviewEntry(BaseModel):
    doc_id: str
    doc_name: str
    preview: str


class ContextPassage(CamelModel):
    id: str
    doc_id: str
    doc_name: str
    order: int
    text: str


class Completeness(CamelModel):
    score: float
    missing: List[str] = Field(default_factory=list)
    reasons: List[str] = Field(default_factory=list)


class QueryResult(CamelModel):
    answer: str
    contexts: List[ContextPassage]
    completeness: Completeness


class RetrievalResult(BaseModel):
    contexts: List[ContextPassage]
    source: str # vector, lexical or none
