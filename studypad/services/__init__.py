"""Remote clients and storage used by the API."""
