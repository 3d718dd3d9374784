"""Request-time machinery: dispatch, concurrency, engine access, logging."""
