"""
ML Package

Shelf-life knowledge base and the prediction/analysis engines built on it.
"""

from .knowledge_base import (
    KnowledgeBase,
    FoodCategoryProfile,
    default_knowledge_base,
    load_knowledge_base,
)

__all__ = [
    "KnowledgeBase",
    "FoodCategoryProfile",
    "default_knowledge_base",
    "load_knowledge_base",
]
