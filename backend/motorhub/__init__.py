"""Directory and proximity search for car-related businesses."""
