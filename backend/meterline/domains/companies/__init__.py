"""Companies domain: the directory the usage domain resolves tenants from."""
