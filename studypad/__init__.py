"""Study notes assistant: memo storage and retrieval-augmented answers."""
