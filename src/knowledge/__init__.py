"""Knowledge document the assistant answers from."""

from src.knowledge.loader import KnowledgeBase

__all__ = ["KnowledgeBase"]
