"""HTTP surface for the list service."""
