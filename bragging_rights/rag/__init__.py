"""
RAG Core
========

Prompting, response extraction, model access and vector storage.

Components:
    - OllamaModelClient: model pull and chat completion
    - PgVectorStore: embedding storage and similarity search
    - prompt_templates: template assets and value rendering
    - extraction: quoted-saying extraction and essay scrubbing
"""

from bragging_rights.rag.extraction import (
    extract_quoted,
    normalize_saying,
    sayings_match,
    scrub_essay,
)
from bragging_rights.rag.model_client import OllamaModelClient
from bragging_rights.rag.prompt_templates import (
    BULLET_SEPARATOR,
    Items,
    Text,
    TemplateValue,
    UniqueItems,
    load_template,
    render_prompt,
    render_value,
)
from bragging_rights.rag.vector_store import PgVectorStore

__all__ = [
    "OllamaModelClient",
    "PgVectorStore",
    "BULLET_SEPARATOR",
    "Items",
    "Text",
    "TemplateValue",
    "UniqueItems",
    "load_template",
    "render_prompt",
    "render_value",
    "extract_quoted",
    "normalize_saying",
    "sayings_match",
    "scrub_essay",
]
