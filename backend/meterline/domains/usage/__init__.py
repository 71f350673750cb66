"""Usage domain: metering, limit enforcement and usage summaries.

Import from submodules directly; this package re-exports nothing so the
container can import it without pulling in every collaborator.
"""
