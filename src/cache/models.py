# src/cache/models.py — v1
"""Cache domain models: CompilerIdentity, CacheKey, CacheStats."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from compilecache.config.settings import ConfigurationError


def normalize_extension(ext: str) -> str:
    """Lowercase an extension and drop any leading dot ('.JS' -> 'js')."""
    return ext.strip().lstrip(".").lower()


class CompilerIdentity(BaseModel):
    """Immutable descriptor of a compiler backend.

    ``metadata`` is the backend's identity mapping as reported, plus a
    ``version`` key once the backend has been initialized.
    """

    model_config = ConfigDict(frozen=True)

    extensions: frozenset[str]
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("extensions")
    @classmethod
    def normalize_extensions(cls, v: frozenset[str]) -> frozenset[str]:  # noqa: N805
        normalized = frozenset(normalize_extension(e) for e in v)
        normalized = normalized - {""}
        if not normalized:
            raise ValueError("at least one extension is required")
        return normalized

    @classmethod
    def from_info(cls, info: dict[str, Any]) -> CompilerIdentity:
        """Build an identity from a backend's ``get_identity()`` mapping.

        Accepts either ``{"extension": "coffee"}`` or
        ``{"extensions": [...]}``; the whole mapping becomes metadata.

        Raises:
            ConfigurationError: If no extension is declared.
        """
        raw = info.get("extensions") or info.get("extension")
        if not raw:
            raise ConfigurationError(
                "Compiler must register at least one extension in get_identity()"
            )
        if isinstance(raw, str):
            raw = [raw]
        extensions = frozenset(normalize_extension(e) for e in raw) - {""}
        if not extensions:
            raise ConfigurationError(
                "Compiler must register at least one extension in get_identity()"
            )
        return cls(extensions=extensions, metadata=dict(info))

    @property
    def version(self) -> str | None:
        return self.metadata.get("version")

    def with_version(self, version: str) -> CompilerIdentity:
        """Return a copy whose metadata records the initialized version."""
        return CompilerIdentity(
            extensions=self.extensions,
            metadata={**self.metadata, "version": version},
        )

    def payload(self) -> dict[str, Any]:
        """Structured value digested into the cache namespace."""
        return {"extensions": sorted(self.extensions), "metadata": self.metadata}


class CacheKey(BaseModel):
    """(namespace digest, source digest) pair locating one cache entry."""

    model_config = ConfigDict(frozen=True)

    namespace_digest: str
    source_digest: str


class CacheStats(BaseModel):
    """Process-local hit/miss counters."""

    hits: int = 0
    misses: int = 0

    @property
    def total(self) -> int:
        return self.hits + self.misses
