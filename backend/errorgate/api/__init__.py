"""API Layer: FastAPI routes, error dispatch middleware and framework rules.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All error responses go through ErrorDispatcher

Design Decisions:
    - Thin routes delegate to services
"""
