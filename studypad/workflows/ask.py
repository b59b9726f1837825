from __future__ import annotations

import logging
from operator import add
from typing import Annotated, Callable, List, TypedDict

from langgraph.graph import END, StateGraph

from studypad.services.notes_repository import HistoryRecord
from studypad.services.rag.results import RetrievalResult
from studypad.services.rag.vector_client import RetrievedContext

logger = logging.getLogger(__name__)


class AskState(TypedDict, total=False):
    user: str
    question: str
    logs: Annotated[List[str], add]
    retrieval: RetrievalResult
    prompt: str
    answer: str
    record: HistoryRecord


def build_ask_workflow(
    *,
    retrieve: Callable[[str], RetrievalResult],
    compose: Callable[[str, RetrievedContext], str],
    generate: Callable[[str], str],
    persist: Callable[[str, str, str], HistoryRecord],
):
    """Compile the embed -> retrieve -> compose -> generate -> persist chain.

    ``retrieve`` must not raise: it reports failures through its result.
    Exceptions from ``generate`` or ``persist`` abort the run and reach the
    caller of ``invoke``.
    """

    graph = StateGraph(AskState)

    def retrieve_context(state: AskState) -> AskState:
        result = retrieve(state["question"])
        if result.ok:
            entry = f"retrieval: {len(result.context)} matches"
        else:
            entry = f"retrieval skipped: {result.error}"
        return {"retrieval": result, "logs": [entry]}

    def compose_prompt(state: AskState) -> AskState:
        result = state["retrieval"]
        context = result.context if result.ok else []
        prompt = compose(state["question"], context)
        return {
            "prompt": prompt,
            "logs": ["prompt: templated" if prompt != state["question"] else "prompt: bare question"],
        }

    def generate_answer(state: AskState) -> AskState:
        answer = generate(state["prompt"])
        return {"answer": answer, "logs": ["answer generated"]}

    def persist_record(state: AskState) -> AskState:
        # History keeps what the user typed, never the enriched prompt.
        record = persist(state["user"], state["question"], state["answer"])
        return {"record": record, "logs": [f"persisted id={record.id}"]}

    graph.add_node("retrieve_context", retrieve_context)
    graph.add_node("compose_prompt", compose_prompt)
    graph.add_node("generate_answer", generate_answer)
    graph.add_node("persist_record", persist_record)

    graph.set_entry_point("retrieve_context")
    graph.add_edge("retrieve_context", "compose_prompt")
    graph.add_edge("compose_prompt", "generate_answer")
    graph.add_edge("generate_answer", "persist_record")
    graph.add_edge("persist_record", END)

    return graph.compile()


__all__ = ["AskState", "build_ask_workflow"]
