"""Domain types, identifiers and error taxonomy."""
