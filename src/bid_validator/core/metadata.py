"""
Exchange metadata tables.

Read-only lookups for the coded values that appear in requests and
responses: vendor directory, creative attributes, product, sensitive and
restricted categories. Also owns the mapping from the ad's detected
category codes onto the publisher's sensitive-category codes.

Loaded once and shared between validator instances; nothing mutates it
after construction.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

import structlog

logger = structlog.get_logger()

DEFAULT_METADATA_PATH = Path(__file__).parent.parent / "data" / "metadata.json"

_TABLES = (
    "vendors",
    "creative_attributes",
    "product_categories",
    "sensitive_categories",
    "restricted_categories",
)


def _int_table(raw: Mapping[str, Any]) -> Mapping[int, str]:
    return MappingProxyType({int(k): str(v) for k, v in raw.items()})


@dataclass(frozen=True)
class SensitiveCategoryMapping:
    """
    Decodes ad category codes into sensitive-category codes.

    Codes at or above ``threshold`` are sensitive and map to
    ``code - offset``; entries in ``overrides`` take precedence over the
    linear rule so individual codes can be corrected without touching it.
    """

    threshold: int = 10
    offset: int = 9
    overrides: Mapping[int, int] = field(default_factory=dict)

    def decode(self, code: int) -> Optional[int]:
        if code in self.overrides:
            return self.overrides[code]
        if code >= self.threshold:
            return code - self.offset
        return None


@dataclass(frozen=True)
class Metadata:
    """Static lookup tables for coded exchange values."""

    vendors: Mapping[int, str] = field(default_factory=dict)
    creative_attributes: Mapping[int, str] = field(default_factory=dict)
    product_categories: Mapping[int, str] = field(default_factory=dict)
    sensitive_categories: Mapping[int, str] = field(default_factory=dict)
    restricted_categories: Mapping[int, str] = field(default_factory=dict)
    sensitive_mapping: SensitiveCategoryMapping = field(
        default_factory=SensitiveCategoryMapping
    )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Metadata":
        tables = {name: _int_table(data.get(name) or {}) for name in _TABLES}

        raw_mapping = data.get("sensitive_category_mapping") or {}
        mapping = SensitiveCategoryMapping(
            threshold=int(raw_mapping.get("threshold", 10)),
            offset=int(raw_mapping.get("offset", 9)),
            overrides=MappingProxyType(
                {int(k): int(v) for k, v in (raw_mapping.get("overrides") or {}).items()}
            ),
        )
        return cls(sensitive_mapping=mapping, **tables)

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "Metadata":
        """Load metadata from a JSON file (the packaged copy by default)."""
        path = Path(path) if path else DEFAULT_METADATA_PATH
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid metadata file {path}: {e}") from e

        metadata = cls.from_dict(data)
        logger.debug(
            "metadata_loaded",
            path=str(path),
            vendors=len(metadata.vendors),
            sensitive_categories=len(metadata.sensitive_categories),
        )
        return metadata

    def decode_sensitive_category(self, code: int) -> Optional[int]:
        """Sensitive-category code for an ad category, or None if not sensitive."""
        return self.sensitive_mapping.decode(code)

    def sensitive_categories_of(self, categories: set[int]) -> set[int]:
        decoded = (self.decode_sensitive_category(c) for c in categories)
        return {c for c in decoded if c is not None}

    def describe(self, table: str, code: int) -> str:
        """Human-readable name for a code, e.g. for logs and the CLI."""
        if table not in _TABLES:
            raise ValueError(f"Unknown metadata table: {table}")
        names = getattr(self, table)
        return names.get(code, f"unknown ({code})")
