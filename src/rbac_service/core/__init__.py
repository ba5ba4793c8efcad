"""Application core: configuration, errors, middleware, lifecycle."""
