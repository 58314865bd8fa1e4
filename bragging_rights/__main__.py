"""Run one saying-guessing workflow against the configured services.

Usage:
    python -m bragging_rights --model llama3 --attempts 9 --fresh
"""

import argparse
import asyncio
import sys

from pydantic import ValidationError

from bragging_rights.config.settings import Settings, get_settings
from bragging_rights.schemas.domain import WorkflowResult
from bragging_rights.services.bootstrap import open_services
from bragging_rights.services.workflow import RagWorkflow
from bragging_rights.utils.errors import BraggingRightsError, ConfigurationError
from bragging_rights.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bragging_rights",
        description="Generate sayings and essays, index the essays, then let the model guess the sayings back.",
    )
    parser.add_argument("--model", help="Generation model (default: OLLAMA_LLM_MODEL)")
    parser.add_argument(
        "--attempts", type=int, help="Saying generation attempts (default: SAYING_ATTEMPTS)"
    )
    parser.add_argument(
        "--no-candidates",
        action="store_true",
        help="Ask for a blind guess instead of offering the generated sayings",
    )
    parser.add_argument(
        "--fresh", action="store_true", help="Delete stored documents before the run"
    )
    return parser


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """
    Merge command-line overrides into settings, validating the result.

    Raises:
        ConfigurationError: If an override violates a settings constraint
    """
    overrides: dict[str, object] = {}
    if args.attempts is not None:
        overrides["saying_attempts"] = args.attempts
    if args.no_candidates:
        overrides["guess_with_candidates"] = False
    if not overrides:
        return settings

    try:
        return Settings.model_validate({**settings.model_dump(), **overrides})
    except ValidationError as e:
        raise ConfigurationError(
            message="Invalid command-line override",
            details={"errors": [err["msg"] for err in e.errors()], **overrides},
        ) from e


async def run_workflow(args: argparse.Namespace) -> WorkflowResult:
    settings = apply_overrides(get_settings(), args)

    async with open_services(settings, fresh=args.fresh) as services:
        workflow = RagWorkflow(services.model_client, services.vector_store, settings)
        return await workflow.run(args.model)


def print_result(result: WorkflowResult) -> None:
    for guess in result.guesses:
        mark = "+" if guess.correct else "-"
        print(f"[{mark}] saying: {guess.saying}")
        print(f"    guess:  {guess.guess or '<no quoted answer>'}")
    print(
        f"{result.correct_count}/{len(result.guesses)} correct "
        f"(model={result.model}, store_ms={result.store_ms:.0f})"
    )


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()

    try:
        result = asyncio.run(run_workflow(args))
    except BraggingRightsError as e:
        logger.exception("Run aborted", error=e.message, details=e.details)
        return 1

    print_result(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
