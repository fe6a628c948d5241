"""Application configuration, database and identity plumbing."""
