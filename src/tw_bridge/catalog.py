"""Catalog of placeable blocks offered to script authors."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable


@dataclass(slots=True, frozen=True)
class BlockChoice:
    name: str
    block_id: str


@dataclass(slots=True)
class BlockCatalog:
    """Maps block ids to display names and resolves either form back to an id."""

    choices: list[BlockChoice] = field(default_factory=list)

    @classmethod
    def from_pairs(cls, pairs: Iterable[Iterable[Any]]) -> BlockCatalog:
        """Build from ``[name, id]`` pairs, skipping malformed entries."""
        choices: list[BlockChoice] = []
        seen: set[str] = set()
        for pair in pairs:
            items = list(pair) if isinstance(pair, (list, tuple)) else []
            if len(items) != 2:
                continue
            name, block_id = (str(item).strip() for item in items)
            if not name or not block_id or block_id.lower() in seen:
                continue
            seen.add(block_id.lower())
            choices.append(BlockChoice(name=name, block_id=block_id))
        return cls(choices=choices)

    @classmethod
    def from_mapping(cls, mapping: dict[str, Any]) -> BlockCatalog:
        return cls.from_pairs([name, block_id] for block_id, name in mapping.items())

    @classmethod
    def load(cls, path: str | Path) -> BlockCatalog:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if isinstance(data, dict):
            return cls.from_mapping(data)
        if isinstance(data, list):
            return cls.from_pairs(data)
        raise ValueError(f"Unsupported block catalog format in {path}")

    def __len__(self) -> int:
        return len(self.choices)

    def display_name(self, block_id: str) -> str | None:
        wanted = block_id.strip().lower()
        for choice in self.choices:
            if choice.block_id.lower() == wanted:
                return choice.name
        return None

    def resolve(self, value: str) -> str:
        """Return the block id for an id or display name; unknown values pass through."""
        wanted = value.strip().lower()
        for choice in self.choices:
            if choice.block_id.lower() == wanted:
                return choice.block_id
        for choice in self.choices:
            if choice.name.lower() == wanted:
                return choice.block_id
        return value.strip()

    def menu_items(self) -> list[dict[str, str]]:
        return [{"text": choice.name, "value": choice.block_id} for choice in self.choices]
