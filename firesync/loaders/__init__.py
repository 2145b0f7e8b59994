"""Writers for destination tables."""

from .base import BaseLoader, DryRunLoader, DEFAULT_BATCH_SIZE
from .supabase_loader import SupabaseLoader

__all__ = [
    "BaseLoader",
    "DEFAULT_BATCH_SIZE",
    "DryRunLoader",
    "SupabaseLoader",
]
