"""Services Layer — imperative shell around the pure core.

Invariants:
    - Services perform IO (DB); decisions are delegated to core/
    - Core rejections are raised here as MutualAidError, never swallowed

Design Decisions:
    - Load -> decide (core) -> persist: each route reads like the impureim sandwich
"""
