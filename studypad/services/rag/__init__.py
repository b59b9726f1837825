"""Retrieval-augmented question answering over saved study notes."""
