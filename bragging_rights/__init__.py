"""
Bragging Rights
===============

RAG demonstration workflow: an LLM invents sayings, writes an essay about
each one, the essays are embedded into pgvector, and the LLM has to guess
the saying back from the nearest retrieved essay.

Features:
- Ollama for generation and embeddings (via LangChain)
- pgvector similarity search (HNSW, cosine distance)
- Structured logging via structlog
"""

__version__ = "1.0.0"
