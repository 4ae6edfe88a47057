"""Services Layer: application services that raise tagged Failures.

Invariants:
    - Services raise errorgate.core.errors.Failure values, never HTTP errors
    - Services hold per-application state only (attached to app.state)
"""
