"""Owner-scoped repositories over the ORM models."""
