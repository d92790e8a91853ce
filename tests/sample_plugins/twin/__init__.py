"""Two modules whose listener functions share a name."""
