"""Route Modules — one file per resource.

Invariants:
    - Each module defines its own APIRouter with prefix and tags
    - Authorization always goes through services/access_guard.authorize

Design Decisions:
    - Explicit registration in main.py over auto-discovery
"""
