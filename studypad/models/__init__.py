"""Domain models shared by the HTTP layer."""
