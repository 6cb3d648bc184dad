"""Markdown prompt files for the grouping conversation.

Each file holds ``## name`` sections separated by ``---`` lines. Sections
are rendered with ``str.format``, so literal braces in a prompt are doubled.
"""

import re
from functools import lru_cache
from importlib import resources

SECTION_SEPARATOR = re.compile(r"\n---\n")
SECTION_HEADER = re.compile(r"^##\s+(\w+)\s*\n(.+)$", re.DOTALL)


def parse_sections(content: str) -> dict[str, str]:
    """Split a prompt file into named sections.

    Chunks without a ``## name`` header (such as the file preamble) are
    ignored.
    """
    sections: dict[str, str] = {}
    for chunk in SECTION_SEPARATOR.split(content):
        match = SECTION_HEADER.match(chunk.strip())
        if match:
            sections[match.group(1)] = match.group(2).strip()
    return sections


@lru_cache(maxsize=None)
def load_prompts(filename: str) -> dict[str, str]:
    """Load and cache the sections of a prompt file shipped with this package."""
    resource = resources.files(__package__).joinpath(filename)
    if not resource.is_file():
        raise FileNotFoundError(f"Prompt file not found: {filename}")
    return parse_sections(resource.read_text(encoding="utf-8"))


def get_prompt(filename: str, prompt_name: str, **kwargs: object) -> str:
    """Render one prompt section.

    Args:
        filename: Prompt file in this package, e.g. 'grouping.md'.
        prompt_name: Section name.
        **kwargs: Placeholder values. Without any, the raw section is returned.

    Raises:
        KeyError: If the section or one of its placeholders is unknown.
    """
    prompts = load_prompts(filename)
    if prompt_name not in prompts:
        raise KeyError(
            f"Prompt '{prompt_name}' not found in {filename} "
            f"(available: {', '.join(sorted(prompts))})"
        )

    template = prompts[prompt_name]
    if not kwargs:
        return template

    try:
        return template.format(**kwargs)
    except KeyError as e:
        raise KeyError(f"Prompt '{prompt_name}' in {filename} needs variable {e}") from e


def clear_cache() -> None:
    load_prompts.cache_clear()
