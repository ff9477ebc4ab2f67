from __future__ import annotations
from .base import ShopfloorProvider
from .memory import InMemoryProvider

def get_provider(provider_name: str) -> ShopfloorProvider:
    if provider_name == "memory":
        return InMemoryProvider()
    raise ValueError(f"Unknown provider: {provider_name}")
