"""
Domain Models
=============

Data passed between the workflow steps, the vector store and the CLI.
"""

from typing import Annotated, Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class Document(BaseModel):
    """
    Unit persisted to the vector store.

    Wraps scrubbed essay text; the embedding is computed on insert and
    never held on the model. Owned by the store after ``add``.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4, description="Document identifier")
    content: Annotated[str, Field(min_length=1, description="Essay text")]
    metadata: dict[str, Any] = Field(
        default_factory=dict, description="Free-form metadata stored as JSONB"
    )


class SimilarityResult(BaseModel):
    """
    One similarity search match.

    Attributes:
        document: Matched document
        distance: Raw value of the configured distance operator (lower = closer)
        similarity: Convenience score, ``1 - distance`` for cosine distance
    """

    document: Document
    distance: float
    similarity: float


class SayingGuess(BaseModel):
    """Outcome of asking the model to reconstruct a saying from an essay."""

    saying: str = Field(..., description="Ground-truth saying")
    essay: str = Field(..., description="Essay retrieved by similarity search")
    raw_response: str = Field(..., description="Unparsed model response")
    guess: str | None = Field(
        default=None, description="Quoted answer extracted from the response"
    )
    correct: bool = Field(default=False, description="Guess matches the saying")
    search_ms: float = Field(default=0.0, ge=0, description="Similarity search latency")


class WorkflowResult(BaseModel):
    """Summary of one complete workflow run."""

    run_id: str | None = Field(default=None, description="Id bound to the run's log events")
    model: str
    sayings: list[str] = Field(default_factory=list)
    guesses: list[SayingGuess] = Field(default_factory=list)
    store_ms: float = Field(default=0.0, ge=0, description="Time spent indexing essays")

    @property
    def correct_count(self) -> int:
        """Number of guesses that matched their saying."""
        return sum(1 for g in self.guesses if g.correct)

    @property
    def accuracy(self) -> float:
        """Share of correct guesses (0.0 when nothing was guessed)."""
        if not self.guesses:
            return 0.0
        return self.correct_count / len(self.guesses)
