"""Terminal output and interaction for prq."""
