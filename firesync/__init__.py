"""
Firestore to Supabase sync

Copies Firebase Firestore collections, and their subcollections, into
Supabase (PostgreSQL) tables keyed by document id.

Supports:
- Dry runs, insert-only upserts and forced overwrites
- Batched writes with per-record fallback
- Custom collection mappings loaded from JSON
- Offline runs from a Firestore JSON export
"""

__version__ = "0.1.0"
