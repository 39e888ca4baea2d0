"""Core Layer — pure decision logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, models/ or db/
    - All functions are pure and deterministic (time is passed in, never read)
    - Core never logs and never raises for a documented input; rejections are values

Design Decisions:
    - Functional core separated from imperative shell: routes load rows, core decides,
      routes persist (ADR: impureim sandwich)
"""
