"""
Storage Module

Relational persistence for snippets, error patterns and developer context.
"""

from devassist.storage.code_store import CodeStore, StoreNotInitializedError

__all__ = [
    "CodeStore",
    "StoreNotInitializedError",
]
