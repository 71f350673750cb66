"""Infrastructure adapters.

Adapters implement protocols defined in core/protocols/.
Each adapter wraps one external collaborator (event bus, report generator, clock).
"""
