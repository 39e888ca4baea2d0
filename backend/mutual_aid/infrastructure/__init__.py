"""Infrastructure Layer — database access and cross-cutting concerns.

Invariants:
    - Infrastructure never imports core/ decision logic (errors excepted)
    - All driver exceptions mapped to core/errors.py types before leaving this layer
"""
