"""
Ollama Model Client
===================

Model administration (pull) over the Ollama HTTP API and chat completion
through LangChain's ChatOllama.

No retries: a failed pull or completion aborts the run.

Example:
    client = OllamaModelClient(settings)
    await client.pull_models("llama3")
    text = await client.complete("Tell me a saying", "llama3")
"""

from typing import Any

import httpx
from langchain_ollama import ChatOllama

from bragging_rights.config.settings import Settings, get_settings
from bragging_rights.utils.errors import LLMError, ModelUnavailableError
from bragging_rights.utils.logger import get_logger

logger = get_logger(__name__)


def _same_model(requested: str, available: str) -> bool:
    """``llama3`` matches ``llama3:latest``; explicit tags must match exactly."""
    if ":" not in requested:
        requested = f"{requested}:latest"
    if ":" not in available:
        available = f"{available}:latest"
    return requested == available


class OllamaModelClient:
    """
    Language-model client for one Ollama runtime.

    Architecture:
        OllamaModelClient → httpx → Ollama /api/tags, /api/pull
                          → ChatOllama (LangChain) → Ollama chat API
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """
        Initialize the client.

        Args:
            settings: Application settings (uses default if not provided)
        """
        self._settings = settings or get_settings()
        self._base_url = self._settings.ollama_base_url
        self._client: httpx.AsyncClient | None = None
        self._pulled: set[str] = set()
        self._chat_models: dict[str, ChatOllama] = {}
        self._log = logger.bind(ollama_url=self._base_url)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._settings.ollama_timeout,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def list_models(self) -> list[str]:
        """
        Names of the models present on the runtime.

        Raises:
            httpx.HTTPError: On transport or status failure
        """
        client = await self._get_client()
        response = await client.get("/api/tags")
        response.raise_for_status()
        return [m["name"] for m in response.json().get("models", [])]

    async def is_available(self) -> bool:
        """Check whether the Ollama runtime answers at all."""
        try:
            await self.list_models()
            return True
        except Exception as e:
            self._log.debug("Ollama not available", error=str(e))
            return False

    async def pull(self, model_name: str) -> None:
        """
        Make sure a model is present on the runtime.

        Idempotent: a model already pulled by this client is skipped without
        any request, and a model already on the runtime is not downloaded
        again.

        Args:
            model_name: Model name, optionally with a tag

        Raises:
            ModelUnavailableError: If the runtime cannot provide the model
        """
        if model_name in self._pulled:
            self._log.debug("model_already_pulled", model=model_name)
            return

        try:
            available = await self.list_models()
            if any(_same_model(model_name, name) for name in available):
                self._log.info("model_present", model=model_name)
                self._pulled.add(model_name)
                return

            self._log.info("model_pull_started", model=model_name)
            client = await self._get_client()
            response = await client.post(
                "/api/pull",
                json={"model": model_name, "stream": False},
            )
            response.raise_for_status()
            data: dict[str, Any] = response.json()

        except httpx.HTTPError as e:
            self._log.error("model_pull_failed", model=model_name, error=str(e))
            raise ModelUnavailableError(
                message=f"Failed to pull model {model_name}",
                details={"model": model_name, "error": str(e)},
            ) from e

        if data.get("status") != "success":
            raise ModelUnavailableError(
                message=f"Ollama could not pull model {model_name}",
                details={"model": model_name, "response": data},
            )

        self._pulled.add(model_name)
        self._log.info("model_pulled", model=model_name)

    async def pull_models(self, model_name: str) -> None:
        """Pull the generation model, then the configured embedding model."""
        await self.pull(model_name)
        await self.pull(self._settings.ollama_embedding_model)

    def _chat_model(self, model_name: str) -> ChatOllama:
        if model_name not in self._chat_models:
            self._chat_models[model_name] = ChatOllama(
                model=model_name,
                base_url=self._base_url,
            )
        return self._chat_models[model_name]

    async def complete(self, prompt_text: str, model_name: str) -> str:
        """
        Single stateless chat completion.

        Args:
            prompt_text: Fully rendered prompt
            model_name: Generation model

        Returns:
            Response text

        Raises:
            LLMError: If the call fails
        """
        try:
            self._log.debug(
                "llm_call", model=model_name, prompt_length=len(prompt_text)
            )

            response = await self._chat_model(model_name).ainvoke(prompt_text)
            content = response.content if hasattr(response, "content") else str(response)
            if not isinstance(content, str):
                content = str(content)

            self._log.debug(
                "llm_response", model=model_name, response_length=len(content)
            )
            return content

        except Exception as e:
            self._log.error("llm_call_failed", model=model_name, error=str(e))
            raise LLMError(
                message="LLM call failed",
                details={"model": model_name, "error": str(e)},
            ) from e
