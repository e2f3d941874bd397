"""Transfer services: ordering, copying, progress and keep-awake."""
