# SynapSync Front Matter
# Metadata parsing for cognitive files

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, Optional

import yaml

from synapsync.config.defaults import DEFAULT_VERSION

_FRONTMATTER_PATTERN = re.compile(r"\A---[ \t]*\n(.*?)\n---[ \t]*(?:\n|\Z)", re.DOTALL)
_VERSION_PATTERN = re.compile(r"version:\s*['\"]?([0-9]+\.[0-9]+\.[0-9]+)['\"]?", re.IGNORECASE)
_TITLE_PATTERN = re.compile(r"^#\s+(.+)$", re.MULTILINE)
_BLOCK_ITEM_PATTERN = re.compile(r"^\s*-\s+")

_KNOWN_FIELDS = ("name", "version", "description", "author", "license", "category", "tags", "providers")


@dataclass
class CognitiveMetadata:
    """
    Metadata declared in a cognitive's front matter.

    Known keys get typed fields; anything else is kept in ``extra``.
    """

    name: Optional[str] = None
    version: Optional[str] = None
    description: Optional[str] = None
    author: Optional[Any] = None
    license: Optional[str] = None
    category: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    providers: list[str] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> CognitiveMetadata:
        """Create from a parsed front-matter mapping."""
        return cls(
            name=_as_text(data.get("name")),
            version=_as_text(data.get("version")),
            description=_as_text(data.get("description")),
            author=data.get("author"),
            license=_as_text(data.get("license")),
            category=_as_text(data.get("category")),
            tags=_as_list(data.get("tags")),
            providers=_as_list(data.get("providers")),
            extra={k: v for k, v in data.items() if k not in _KNOWN_FIELDS},
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a flat dictionary, dropping empty fields."""
        data: dict[str, Any] = dict(self.extra)
        for key in _KNOWN_FIELDS:
            value = getattr(self, key)
            if value is not None and value != []:
                data[key] = value
        return data


def parse_frontmatter(content: str) -> CognitiveMetadata:
    """
    Parse the front-matter block at the very start of a file.

    The block is parsed as YAML with every scalar kept as written
    (``1.10`` stays ``"1.10"``, ``no`` stays ``"no"``). If that fails, a
    permissive line parser handles flat scalars, inline ``[a, b]`` arrays
    and ``- item`` block arrays. A missing or unparsable header yields
    empty metadata.

    Args:
        content: Full file content.

    Returns:
        CognitiveMetadata (possibly empty).
    """
    content = content.replace("\r\n", "\n")
    match = _FRONTMATTER_PATTERN.match(content)
    if not match:
        return CognitiveMetadata()

    block = match.group(1)
    try:
        data = yaml.load(block, Loader=yaml.BaseLoader)
    except yaml.YAMLError:
        data = _parse_simple_yaml(block)

    if not isinstance(data, dict):
        return CognitiveMetadata()

    return CognitiveMetadata.from_mapping({str(k): v for k, v in data.items()})


def extract_name(metadata: CognitiveMetadata, dir_name: str, content: str) -> str:
    """Resolve a cognitive's name: front matter, then first heading, then directory."""
    return _first_of(
        lambda: metadata.name,
        lambda: _title_slug(content),
        lambda: dir_name,
    )


def extract_version(metadata: CognitiveMetadata, content: str) -> str:
    """Resolve a cognitive's version: front matter, then a version pattern, then the default."""
    return _first_of(
        lambda: metadata.version,
        lambda: _version_in_text(content),
        lambda: DEFAULT_VERSION,
    )


def _first_of(*lookups: Callable[[], Optional[str]]) -> str:
    """Return the first non-empty result of the given lookups, in order."""
    for lookup in lookups:
        value = lookup()
        if value:
            return value
    raise ValueError("No lookup produced a value")


def _title_slug(content: str) -> Optional[str]:
    """Kebab-case the first markdown heading, if any."""
    match = _TITLE_PATTERN.search(content)
    if not match:
        return None
    slug = re.sub(r"[^a-z0-9]+", "-", match.group(1).lower()).strip("-")
    return slug or None


def _version_in_text(content: str) -> Optional[str]:
    match = _VERSION_PATTERN.search(content)
    return match.group(1) if match else None


def _parse_simple_yaml(block: str) -> dict[str, Any]:
    """Line-based fallback for front matter that is not valid YAML."""
    result: dict[str, Any] = {}
    current_key: Optional[str] = None
    current_list: Optional[list[str]] = None

    for line in block.split("\n"):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        if _BLOCK_ITEM_PATTERN.match(line):
            if current_list is not None:
                current_list.append(_clean_value(_BLOCK_ITEM_PATTERN.sub("", line).strip()))
            continue

        key, sep, raw_value = line.partition(":")
        if not sep or not key.strip():
            continue

        if current_key is not None and current_list is not None:
            result[current_key] = current_list
        current_key, current_list = None, None

        key = key.strip()
        raw_value = raw_value.strip()

        if raw_value in ("", "|", ">"):
            current_key, current_list = key, []
        elif raw_value.startswith("[") and raw_value.endswith("]"):
            inner = raw_value[1:-1].strip()
            result[key] = [_clean_value(item.strip()) for item in inner.split(",")] if inner else []
        else:
            result[key] = _clean_value(raw_value)

    if current_key is not None and current_list is not None:
        result[current_key] = current_list

    return result


def _clean_value(value: str) -> str:
    """Remove matching surrounding quotes."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def _as_text(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def _as_list(value: Any) -> list[str]:
    if value is None or value == "":
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Iterable):
        return [str(item) for item in value]
    return [str(value)]
