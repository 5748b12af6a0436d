"""Core Layer — pure request boundary logic, no IO, no async, no framework imports.

Invariants:
    - No module in core/ imports from api/, infrastructure/, or config
    - All functions are deterministic given their inputs (identity generation
      is injected)

Design Decisions:
    - Functional core separated from the framework shell: api/ adapts Starlette
      requests, core/ never sees them
"""
