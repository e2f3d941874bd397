"""Device-side storage operations: availability probing and folder management."""
