"""Process-wide knowledge base access."""

from __future__ import annotations

from functools import lru_cache

from physio.knowledge.base import KnowledgeBase

__all__ = ["KnowledgeBase", "get_knowledge_base"]


@lru_cache(maxsize=1)
def get_knowledge_base() -> KnowledgeBase:
    """Builds the default knowledge base on first use and returns the same instance after."""
    return KnowledgeBase()
