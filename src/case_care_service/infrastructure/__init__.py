"""Infrastructure package: database access and repositories."""
