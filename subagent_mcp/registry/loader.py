"""Persisted group format.

Two layouts are supported:

- a single JSON file holding either an array of group records or an
  object ``{"instructions": "...", "groups": [...]}``;
- a directory with one sub-directory per group containing ``group.json``
  (the record without description and prompt), ``description.md`` and
  ``prompt.md``, plus an optional top-level ``instructions.md``.

Records use camelCase keys.
"""

import json
import logging
from pathlib import Path
from typing import Any, List

from pydantic import BaseModel, Field, ValidationError

from subagent_mcp.core.models import ToolGroup
from subagent_mcp.registry.exceptions import GroupsFormatError, GroupsNotFoundError

logger = logging.getLogger(__name__)

GROUP_FILE = "group.json"
DESCRIPTION_FILE = "description.md"
PROMPT_FILE = "prompt.md"
INSTRUCTIONS_FILE = "instructions.md"


class GroupsDocument(BaseModel):
    """Loaded groups plus the optional server instructions."""

    groups: List[ToolGroup] = Field(default_factory=list)
    instructions: str | None = None


def _parse_group(record: Any, source: str) -> ToolGroup:
    try:
        return ToolGroup.model_validate(record)
    except ValidationError as e:
        raise GroupsFormatError(f"Invalid group record in {source}: {e}") from e


def _load_file(path: Path) -> GroupsDocument:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise GroupsFormatError(f"{path} is not valid JSON: {e}") from e

    instructions = None
    if isinstance(data, dict):
        instructions = data.get("instructions")
        data = data.get("groups")
    if not isinstance(data, list):
        raise GroupsFormatError(
            f"{path} must contain an array of groups or an object with a 'groups' array"
        )
    if instructions is not None and not isinstance(instructions, str):
        raise GroupsFormatError(f"{path}: 'instructions' must be a string")

    groups = [_parse_group(record, str(path)) for record in data]
    return GroupsDocument(groups=groups, instructions=instructions)


def _read_optional(path: Path) -> str | None:
    if not path.is_file():
        return None
    return path.read_text(encoding="utf-8").strip()


def _load_directory(directory: Path) -> GroupsDocument:
    groups: list[ToolGroup] = []

    for group_dir in sorted(p for p in directory.iterdir() if p.is_dir()):
        group_file = group_dir / GROUP_FILE
        if not group_file.is_file():
            logger.debug(f"Skipping {group_dir}: no {GROUP_FILE}")
            continue

        try:
            record = json.loads(group_file.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise GroupsFormatError(f"{group_file} is not valid JSON: {e}") from e
        if not isinstance(record, dict):
            raise GroupsFormatError(f"{group_file} must contain a JSON object")

        record["description"] = _read_optional(group_dir / DESCRIPTION_FILE) or ""
        record["systemPrompt"] = _read_optional(group_dir / PROMPT_FILE) or ""
        groups.append(_parse_group(record, str(group_file)))

    return GroupsDocument(
        groups=groups,
        instructions=_read_optional(directory / INSTRUCTIONS_FILE),
    )


def load_groups(path: str | Path) -> GroupsDocument:
    """Load groups from a JSON file or a directory-per-group layout.

    Args:
        path: File or directory written by save_groups/save_group_directories.

    Returns:
        GroupsDocument with groups sorted by id.

    Raises:
        GroupsNotFoundError: If ``path`` does not exist.
        GroupsFormatError: If the content cannot be decoded.
    """
    path = Path(path)
    if not path.exists():
        raise GroupsNotFoundError(str(path))

    document = _load_directory(path) if path.is_dir() else _load_file(path)
    document.groups.sort(key=lambda g: g.id)

    logger.info(f"Loaded {len(document.groups)} groups from {path}")
    return document


def save_groups(
    groups: list[ToolGroup], path: str | Path, instructions: str | None = None
) -> Path:
    """Write groups as a single JSON file.

    Without instructions the file is a plain array of records.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    records = [group.to_record() for group in groups]
    data: Any = records if instructions is None else {
        "instructions": instructions,
        "groups": records,
    }
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")

    logger.info(f"Saved {len(groups)} groups to {path}")
    return path


def save_group_directories(
    groups: list[ToolGroup], directory: str | Path, instructions: str | None = None
) -> Path:
    """Write one sub-directory per group, plus instructions.md when given."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    for group in groups:
        group_dir = directory / group.id
        group_dir.mkdir(parents=True, exist_ok=True)

        record = group.to_record()
        record.pop("description", None)
        record.pop("systemPrompt", None)
        (group_dir / GROUP_FILE).write_text(
            json.dumps(record, indent=2) + "\n", encoding="utf-8"
        )
        (group_dir / DESCRIPTION_FILE).write_text(group.description + "\n", encoding="utf-8")
        (group_dir / PROMPT_FILE).write_text(group.system_prompt + "\n", encoding="utf-8")

    if instructions is not None:
        (directory / INSTRUCTIONS_FILE).write_text(instructions + "\n", encoding="utf-8")

    logger.info(f"Saved {len(groups)} group directories under {directory}")
    return directory
