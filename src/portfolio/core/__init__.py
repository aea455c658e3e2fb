"""Core application infrastructure: configuration, exceptions, lifespan."""
