"""
Schemas Package
===============

Pydantic domain objects shared by the workflow steps.
"""

from bragging_rights.schemas.domain import (
    Document,
    SayingGuess,
    SimilarityResult,
    WorkflowResult,
)

__all__ = [
    "Document",
    "SayingGuess",
    "SimilarityResult",
    "WorkflowResult",
]
