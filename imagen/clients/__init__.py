"""Live HTTP clients for the image providers."""
