"""
Prompt Templates
================

Loads the prompt template assets and renders their named values.

Template values come in three shapes:
- Text: substituted verbatim
- Items: ordered sequence of strings
- UniqueItems: set of strings

Sequences and sets become a bullet block: elements joined with
``"\\n * "``, no separator before the first element. Templates carry the
leading ``" * "`` themselves.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Union

from langchain_core.prompts import PromptTemplate

from bragging_rights.utils.errors import ConfigurationError

BULLET_SEPARATOR = "\n * "

DEFAULT_PROMPTS_DIR = Path(__file__).resolve().parent.parent / "prompts"

GENERATE_SAYING = "generate-saying"
GENERATE_ESSAY = "generate-essay"
GUESS_SAYING = "guess-saying"
GUESS_SAYING_BLIND = "guess-saying-blind"

# Parameter names used across the templates
SAYING_PARAMETER = "saying"
SAYINGS_PARAMETER = "sayings"
ESSAY_PARAMETER = "essay"
MAX_WORDS_PARAMETER = "max_words"


# =============================================================================
# Template values
# =============================================================================


@dataclass(frozen=True)
class Text:
    """A single string, rendered verbatim."""

    value: str


@dataclass(frozen=True)
class Items:
    """An ordered sequence of strings, rendered as a bullet block."""

    values: tuple[str, ...]

    def __init__(self, values: Iterable[str]) -> None:
        object.__setattr__(self, "values", tuple(values))


@dataclass(frozen=True)
class UniqueItems:
    """A set of strings, rendered as a bullet block in sorted order."""

    values: frozenset[str]

    def __init__(self, values: Iterable[str]) -> None:
        object.__setattr__(self, "values", frozenset(values))


TemplateValue = Union[Text, Items, UniqueItems]


def bullet_join(values: Iterable[str]) -> str:
    """Join strings with the bullet separator: ``a\\n * b\\n * c``."""
    return BULLET_SEPARATOR.join(values)


def render_value(value: TemplateValue) -> str:
    """
    Render one template value.

    Args:
        value: Text, Items or UniqueItems

    Returns:
        Text unchanged; Items/UniqueItems as a bullet block
    """
    if isinstance(value, Text):
        return value.value
    if isinstance(value, Items):
        return bullet_join(value.values)
    if isinstance(value, UniqueItems):
        return bullet_join(sorted(value.values))
    raise ConfigurationError(
        message=f"Unsupported template value: {type(value).__name__}",
        details={"value": repr(value)},
    )


def as_template_value(value: object) -> TemplateValue:
    """
    Lift a plain Python value into a TemplateValue.

    ``str`` → Text, ``list``/``tuple`` → Items, ``set``/``frozenset`` → UniqueItems.
    Values that already are TemplateValues pass through; ints are rendered
    as text.
    """
    if isinstance(value, (Text, Items, UniqueItems)):
        return value
    if isinstance(value, str):
        return Text(value)
    if isinstance(value, bool):
        raise ConfigurationError(
            message="Boolean template values are not supported",
            details={"value": value},
        )
    if isinstance(value, int):
        return Text(str(value))
    if isinstance(value, (list, tuple)):
        return Items(str(v) for v in value)
    if isinstance(value, (set, frozenset)):
        return UniqueItems(str(v) for v in value)
    raise ConfigurationError(
        message=f"Unsupported template value type: {type(value).__name__}",
        details={"value": repr(value)},
    )


# =============================================================================
# Template assets
# =============================================================================


@lru_cache
def load_template(name: str, prompts_dir: str | None = None) -> PromptTemplate:
    """
    Load a ``<name>.st`` template asset.

    Args:
        name: Template name without extension
        prompts_dir: Directory to load from (bundled prompts by default)

    Returns:
        LangChain PromptTemplate

    Raises:
        ConfigurationError: If the asset does not exist
    """
    directory = Path(prompts_dir) if prompts_dir else DEFAULT_PROMPTS_DIR
    path = directory / f"{name}.st"

    if not path.is_file():
        raise ConfigurationError(
            message=f"Prompt template not found: {name}",
            details={"path": str(path)},
        )

    return PromptTemplate.from_template(path.read_text(encoding="utf-8"))


def render_prompt(template: PromptTemplate, values: Mapping[str, object]) -> str:
    """
    Render a template with named values.

    Args:
        template: Loaded PromptTemplate
        values: Placeholder name → str / list / set / TemplateValue

    Returns:
        Prompt text

    Raises:
        ConfigurationError: If a placeholder has no value
    """
    rendered = {key: render_value(as_template_value(v)) for key, v in values.items()}

    missing = set(template.input_variables) - set(rendered)
    if missing:
        raise ConfigurationError(
            message="Missing prompt template values",
            details={"missing": sorted(missing)},
        )

    return template.format(**rendered)
