"""Application wiring: action dispatch and cancellation."""
