from .memory import InMemoryGameCatalog, InMemoryPickStore

__all__ = ["InMemoryGameCatalog", "InMemoryPickStore"]
