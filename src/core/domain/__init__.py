"""Domain models and entities.

- Pure, strict data structures (Pydantic v2) plus the entry vocabulary.
- The domain knows nothing about HTTP, the CLI or storage engines.
"""
