"""Signal conditioning, metrics extraction and particle simulation."""
