"""Infrastructure layer - external services and caching."""
