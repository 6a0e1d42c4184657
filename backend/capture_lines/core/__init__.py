"""Core Layer — capture line codec and lifecycle, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - The only impurities are an injected clock and an injected random source

Design Decisions:
    - Functional core separated from imperative shell: the shell persists,
      the core decides
"""
