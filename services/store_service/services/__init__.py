"""Store service business logic, callable without the HTTP layer."""
