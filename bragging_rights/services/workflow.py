"""
RAG Workflow
============

Orchestrates one saying-guessing run:

    pull models → generate sayings → generate essays → index essays
                → (per saying) retrieve nearest essay → guess saying

Every step is sequential and single-attempt. Extraction misses shrink the
sample silently; every other failure aborts the run.
"""

import time
from typing import Any, Protocol, Sequence
from uuid import uuid4

from bragging_rights.config.settings import Settings, get_settings
from bragging_rights.rag.extraction import (
    extract_quoted,
    normalize_saying,
    sayings_match,
    scrub_essay,
)
from bragging_rights.rag.prompt_templates import (
    ESSAY_PARAMETER,
    GENERATE_ESSAY,
    GENERATE_SAYING,
    GUESS_SAYING,
    GUESS_SAYING_BLIND,
    MAX_WORDS_PARAMETER,
    SAYING_PARAMETER,
    SAYINGS_PARAMETER,
    Items,
    Text,
    UniqueItems,
    load_template,
    render_prompt,
)
from bragging_rights.schemas.domain import (
    Document,
    SayingGuess,
    SimilarityResult,
    WorkflowResult,
)
from bragging_rights.utils.errors import RetrievalError, WorkflowError
from bragging_rights.utils.logger import get_logger, run_context

logger = get_logger(__name__)


class ModelClient(Protocol):
    """What the workflow needs from the language-model runtime."""

    async def pull_models(self, model_name: str) -> None: ...

    async def complete(self, prompt_text: str, model_name: str) -> str: ...


class VectorStore(Protocol):
    """What the workflow needs from the vector store."""

    async def add(self, documents: Sequence[Document]) -> None: ...

    async def similarity_search(
        self,
        query_text: str,
        top_k: int | None = None,
        metadata_filter: dict[str, Any] | None = None,
    ) -> list[SimilarityResult]: ...


class RagWorkflow:
    """
    Saying-guessing workflow over explicit service handles.

    Usage:
        async with open_services(settings) as services:
            workflow = RagWorkflow(services.model_client, services.vector_store)
            result = await workflow.run("llama3")
    """

    def __init__(
        self,
        model_client: ModelClient,
        vector_store: VectorStore,
        settings: Settings | None = None,
    ) -> None:
        self._model_client = model_client
        self._vector_store = vector_store
        self._settings = settings or get_settings()
        self._indexed: set[str] = set()
        # tags this run's documents so retrieval ignores earlier runs
        self.run_id = uuid4().hex[:12]

    def _prompt(self, name: str, values: dict[str, object]) -> str:
        template = load_template(name, self._settings.prompts_dir)
        return render_prompt(template, values)

    async def _call(self, name: str, values: dict[str, object], model: str) -> str:
        return await self._model_client.complete(self._prompt(name, values), model)

    async def pull_models(self, model: str) -> None:
        """Ensure the generation and embedding models exist on the runtime."""
        await self._model_client.pull_models(model)

    async def generate_sayings(
        self,
        model: str,
        attempts: int | None = None,
    ) -> list[str]:
        """
        Ask the model for new sayings, one attempt at a time.

        Each prompt lists the sayings produced so far. Responses without a
        quoted saying and repeats of an existing saying are dropped, so the
        result may hold fewer than ``attempts`` sayings.
        """
        if attempts is None:
            attempts = self._settings.saying_attempts
        sayings: list[str] = []
        seen: set[str] = set()

        for attempt in range(1, attempts + 1):
            response = await self._call(
                GENERATE_SAYING, {SAYINGS_PARAMETER: Items(sayings)}, model
            )
            saying = extract_quoted(response)

            if saying is None:
                logger.warning(
                    "No quoted saying in response",
                    attempt=attempt,
                    response_preview=response[:80],
                )
                continue

            key = normalize_saying(saying)
            if key in seen:
                logger.warning("Duplicate saying dropped", attempt=attempt, saying=saying)
                continue

            seen.add(key)
            sayings.append(saying)
            logger.debug("Saying generated", attempt=attempt, saying=saying)

        logger.info("Sayings generated", requested=attempts, produced=len(sayings))
        return sayings

    async def generate_essays(
        self,
        model: str,
        sayings: Sequence[str],
    ) -> tuple[list[Document], dict[str, str]]:
        """
        Write and scrub one essay per saying.

        Returns:
            (documents to index, saying → scrubbed essay)

        Raises:
            WorkflowError: If there are no sayings yet
        """
        if not sayings:
            raise WorkflowError(
                message="Cannot generate essays before any saying exists",
                details={"step": "generate_essays"},
            )

        documents: list[Document] = []
        saying_to_essay: dict[str, str] = {}

        for saying in sayings:
            essay = await self._call(
                GENERATE_ESSAY,
                {
                    SAYING_PARAMETER: Text(saying),
                    MAX_WORDS_PARAMETER: Text(str(self._settings.essay_max_words)),
                },
                model,
            )
            essay = scrub_essay(essay, saying).strip()

            if not essay:
                logger.warning("Essay empty after scrubbing, saying dropped", saying=saying)
                continue

            documents.append(
                Document(content=essay, metadata={"model": model, "run_id": self.run_id})
            )
            saying_to_essay[saying] = essay

        logger.info("Essays generated", count=len(documents))
        return documents, saying_to_essay

    async def index_essays(
        self,
        documents: Sequence[Document],
        saying_to_essay: dict[str, str],
    ) -> float:
        """
        Store the essay documents in the vector store.

        Returns:
            Elapsed milliseconds
        """
        start = time.perf_counter()
        await self._vector_store.add(documents)
        elapsed_ms = (time.perf_counter() - start) * 1000

        stored = {d.content for d in documents}
        self._indexed.update(s for s, e in saying_to_essay.items() if e in stored)

        logger.info("Essays indexed", count=len(documents), store_ms=round(elapsed_ms, 2))
        return elapsed_ms

    async def retrieve_essay(self, saying: str) -> tuple[str, float]:
        """
        Fetch the essay nearest to a saying among this run's documents.

        Returns:
            (essay text, elapsed milliseconds)

        Raises:
            WorkflowError: If the saying's essay was never indexed
            RetrievalError: If the similarity search returns nothing
        """
        if saying not in self._indexed:
            raise WorkflowError(
                message="Cannot retrieve an essay before it is indexed",
                details={"saying": saying},
            )

        start = time.perf_counter()
        matches = await self._vector_store.similarity_search(
            saying, metadata_filter={"run_id": self.run_id}
        )
        elapsed_ms = (time.perf_counter() - start) * 1000

        if not matches:
            raise RetrievalError(
                message="Similarity search returned no documents",
                details={"saying": saying},
            )

        logger.info(
            "Similarity search performed",
            search_ms=round(elapsed_ms, 2),
            distance=round(matches[0].distance, 4),
        )
        return matches[0].document.content, elapsed_ms

    async def guess_saying(
        self,
        model: str,
        saying: str,
        essay: str,
        candidates: Sequence[str] | None = None,
    ) -> SayingGuess:
        """
        Ask the model which saying an essay explains.

        Args:
            model: Generation model
            saying: Ground truth, only used to score the guess
            essay: Retrieved essay
            candidates: Offered sayings; None asks for a blind guess
        """
        if candidates is None:
            response = await self._call(
                GUESS_SAYING_BLIND, {ESSAY_PARAMETER: Text(essay)}, model
            )
        else:
            response = await self._call(
                GUESS_SAYING,
                {
                    ESSAY_PARAMETER: Text(essay),
                    SAYINGS_PARAMETER: UniqueItems(candidates),
                },
                model,
            )

        guess = extract_quoted(response)
        return SayingGuess(
            saying=saying,
            essay=essay,
            raw_response=response,
            guess=guess,
            correct=sayings_match(guess, saying),
        )

    async def run(self, model: str | None = None) -> WorkflowResult:
        """
        Execute the whole workflow once and return its summary.

        Args:
            model: Generation model (settings.ollama_llm_model by default)
        """
        model = model or self._settings.ollama_llm_model

        with run_context(model, self.run_id) as run_id:
            logger.info("Workflow started")

            await self.pull_models(model)

            sayings = await self.generate_sayings(model)
            documents, saying_to_essay = await self.generate_essays(model, sayings)
            store_ms = await self.index_essays(documents, saying_to_essay)

            candidates = (
                list(saying_to_essay) if self._settings.guess_with_candidates else None
            )

            guesses: list[SayingGuess] = []
            for saying in saying_to_essay:
                essay, search_ms = await self.retrieve_essay(saying)
                result = await self.guess_saying(model, saying, essay, candidates)
                result = result.model_copy(update={"search_ms": search_ms})
                guesses.append(result)

                logger.info("Generated saying", saying=saying)
                logger.info("LLM guess", guess=result.guess, correct=result.correct)

            workflow_result = WorkflowResult(
                run_id=run_id,
                model=model,
                sayings=list(saying_to_essay),
                guesses=guesses,
                store_ms=store_ms,
            )
            logger.info(
                "Workflow finished",
                sayings=len(workflow_result.sayings),
                correct=workflow_result.correct_count,
                accuracy=round(workflow_result.accuracy, 3),
            )
        return workflow_result
