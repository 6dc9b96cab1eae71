"""User Service - registration, login and CRUD over a single User resource.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
