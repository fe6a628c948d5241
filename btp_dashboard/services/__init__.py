"""Service layer: auth, statistics and the dashboard controllers."""
