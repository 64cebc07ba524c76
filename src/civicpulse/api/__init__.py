"""API layer: read models for the dashboard and the events wire format.

Key rules:

1. No SQLAlchemy imports - callers pass EventItem lists in
2. The ``{"events": [...]}`` payload shape is the contract other tooling reads
3. Bad input degrades to fewer events, never to an exception
"""
