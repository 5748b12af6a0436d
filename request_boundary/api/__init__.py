"""API Layer — FastAPI/Starlette integration for the request boundary.

Invariants:
    - Framework types stop here: core/ only receives RawRequest
    - Error handlers are registered explicitly by the host app

Design Decisions:
    - Thin shell: adapter translates, dependency caches, handlers map errors to JSON
"""
