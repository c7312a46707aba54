"""Infrastructure adapters for identity management (persistence, email)."""
