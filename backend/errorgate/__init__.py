"""errorgate: global exception dispatch for HTTP services.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
