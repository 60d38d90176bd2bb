"""In-memory collaborators for tests and local experiments."""
