"""Domain model for identity principals."""
