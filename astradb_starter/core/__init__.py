"""Settings, data access and the movie demo workflow."""
