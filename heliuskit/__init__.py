"""Solana key utilities, JSON number reading, collection authority instructions and an enhanced websocket client."""

__version__ = "0.1.0"

__all__ = ["collection_authority", "keys", "numbers", "websocket"]