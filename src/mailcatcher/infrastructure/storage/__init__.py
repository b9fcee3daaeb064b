from .memory_store import InMemoryMessageStore

__all__ = ["InMemoryMessageStore"]
