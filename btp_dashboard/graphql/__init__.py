"""GraphQL schema and request context."""
