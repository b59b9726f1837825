"""Turns retrieved study notes and a question into the prompt sent to the model."""

from __future__ import annotations

from typing import Iterable

from studypad.services.rag.vector_client import RetrievedMatch

CONTEXT_SEPARATOR = "\n---\n"

PROMPT_TEMPLATE = (
    "You are an IT study assistant. Answer the question using the [Study notes] below.\n"
    "If the notes do not cover the question, answer from your general knowledge.\n\n"
    "[Study notes]\n"
    "{notes}\n\n"
    "[Question]\n"
    "{question}"
)


def format_notes(context: Iterable[RetrievedMatch]) -> str:
    """Join matched texts in rank order, each followed by the separator."""

    return "".join(f"{match.text}{CONTEXT_SEPARATOR}" for match in context)


def compose_prompt(question: str, context: Iterable[RetrievedMatch]) -> str:
    """Return the templated prompt, or the bare question when there are no notes."""

    notes = format_notes(context)
    if not notes:
        return question
    return PROMPT_TEMPLATE.format(notes=notes, question=question)


__all__ = ["CONTEXT_SEPARATOR", "PROMPT_TEMPLATE", "compose_prompt", "format_notes"]
