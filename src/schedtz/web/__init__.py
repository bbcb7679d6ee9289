"""HTTP service for schedtz."""
