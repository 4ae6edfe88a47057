"""Core Layer: error taxonomy, classifier, responder, request lifecycle.

Invariants:
    - No module in core/ imports from services/, api/, or infrastructure/
    - No framework imports (FastAPI/Starlette) in core/
    - Classifier and Responder are pure and deterministic (given a clock)
"""
