"""Handlebars prompt rendering for lore generation."""

from collections.abc import Callable
from typing import Any

import pybars


LORE_GENERATOR_SYSTEM_PROMPT = """You are a creative writing assistant specializing in world-building and lore creation.
Your task is to generate detailed, evocative, and consistent lore entries for a fictional world.
Focus on sensory details, historical context, and interesting hooks.
Format your output as clean text suitable for a wiki entry or RPG sourcebook.
Do not surround the output with quotes."""

# Triple-stash everywhere: prompts are plain text, never HTML-escaped.
CONTINUE_ENTRY_TEMPLATE = (
    'Continue the following lore entry based on this instruction: "{{{instruction}}}"\n'
    "\n"
    "[Existing Entry Start]\n"
    "{{{existing}}}\n"
    "[Existing Entry End]"
)
NEW_ENTRY_TEMPLATE = 'Write a new lore entry based on: "{{{instruction}}}"'
SYSTEM_TAG_TEMPLATE = "[System: {{{system}}}]\n\n{{{prompt}}}"

_compiler = pybars.Compiler()
_cache: dict[str, Callable] = {}


class PromptError(Exception):
    """Raised when a Handlebars template fails to compile or render."""


def render_prompt(template_str: str, context: dict[str, Any]) -> str:
    """Compile and render a Handlebars template with the given context.

    Templates are cached by source string to avoid recompilation.
    """
    try:
        compiled = _cache.get(template_str)
        if compiled is None:
            compiled = _compiler.compile(template_str)
            _cache[template_str] = compiled
        return str(compiled(context))
    except Exception as e:
        raise PromptError(f"Template error: {e}") from e


def compose_prompt(instruction: str, existing_content: str = "") -> str:
    """Wrap the user's instruction, continuing existing_content when there is any."""
    if existing_content:
        return render_prompt(
            CONTINUE_ENTRY_TEMPLATE,
            {"instruction": instruction, "existing": existing_content},
        )
    return render_prompt(NEW_ENTRY_TEMPLATE, {"instruction": instruction})


def with_system_tag(prompt: str, system: str = LORE_GENERATOR_SYSTEM_PROMPT) -> str:
    """Prepend the system instruction as a bracketed tag, for completion-only backends."""
    return render_prompt(SYSTEM_TAG_TEMPLATE, {"system": system, "prompt": prompt})
