from typing import Dict, List, Optional, Tuple

import pytest

from studypad.core.config import Settings
from studypad.core.errors import (
    EmbeddingFailure,
    GenerationFailure,
    IndexQueryFailure,
    IndexWriteFailure,
    InvalidInput,
    PersistenceFailure,
)
from studypad.services.notes_repository import HistoryRecord, InMemoryNotesRepository
from studypad.services.rag.prompt import compose_prompt
from studypad.services.rag.service import RAGService, memo_index_id
from studypad.services.rag.vector_client import RetrievedMatch


class _FakeEmbedder:
    def __init__(self, error: Optional[Exception] = None):
        self.calls: List[str] = []
        self._error = error

    def embed(self, text: str) -> List[float]:
        self.calls.append(text)
        if self._error:
            raise self._error
        return [float(len(text)), 1.0]


class _FakeIndex:
    def __init__(self, texts: Optional[List[str]] = None, *, query_error=None, upsert_error=None):
        self.records: Dict[str, Tuple[List[float], str]] = {}
        self.queries: List[Tuple[List[float], Optional[int]]] = []
        self._texts = texts or []
        self._query_error = query_error
        self._upsert_error = upsert_error

    def upsert(self, record_id: str, text: str, vector: List[float]) -> None:
        if self._upsert_error:
            raise self._upsert_error
        self.records[record_id] = (vector, text)

    def query(self, vector: List[float], top_k: Optional[int] = None):
        self.queries.append((vector, top_k))
        if self._query_error:
            raise self._query_error
        return [RetrievedMatch(rank=i, text=text) for i, text in enumerate(self._texts, start=1)]


class _FakeGenerator:
    def __init__(self, answer: str = "answer", error: Optional[Exception] = None):
        self.prompts: List[str] = []
        self._answer = answer
        self._error = error

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self._error:
            raise self._error
        return self._answer


class _FailingRepository(InMemoryNotesRepository):
    def save_or_replace_memo(self, user: str, content: str) -> None:
        raise PersistenceFailure("database is down")

    def save_question_answer(self, user: str, question: str, answer: str) -> HistoryRecord:
        raise PersistenceFailure("database is down")


def _service(*, embedder=None, index=None, generator=None, repository=None) -> RAGService:
    return RAGService(
        Settings(),
        repository=repository or InMemoryNotesRepository(),
        embedding_client=embedder or _FakeEmbedder(),
        vector_client=index or _FakeIndex(),
        generation_client=generator or _FakeGenerator(),
    )


@pytest.mark.parametrize("question", ["", "  ", "\t\n", None])
def test_blank_question_is_rejected_before_any_remote_call(question):
    embedder, index, generator = _FakeEmbedder(), _FakeIndex(), _FakeGenerator()
    repository = InMemoryNotesRepository()
    service = _service(embedder=embedder, index=index, generator=generator, repository=repository)

    with pytest.raises(InvalidInput):
        service.ask(user="alice", question=question)

    assert embedder.calls == []
    assert index.queries == []
    assert generator.prompts == []
    assert repository.list_history("alice") == []


def test_ask_with_context_persists_original_question():
    index = _FakeIndex(["S3 is object storage"])
    generator = _FakeGenerator("S3 is Amazon's object storage service.")
    repository = InMemoryNotesRepository()
    service = _service(index=index, generator=generator, repository=repository)

    record = service.ask(user="alice", question="What is S3?")

    assert record.question == "What is S3?"
    assert record.answer == "S3 is Amazon's object storage service."
    assert record.id == 1
    assert record.created_at
    assert generator.prompts == [
        compose_prompt("What is S3?", [RetrievedMatch(rank=1, text="S3 is object storage")])
    ]
    assert generator.prompts[0] != "What is S3?"
    assert repository.list_history("alice") == [record]


def test_ask_queries_index_with_question_embedding_and_top_k():
    embedder = _FakeEmbedder()
    index = _FakeIndex()
    service = RAGService(
        Settings(RAG_TOP_K=5),
        repository=InMemoryNotesRepository(),
        embedding_client=embedder,
        vector_client=index,
        generation_client=_FakeGenerator(),
    )

    service.ask(user="alice", question="What is IAM?")

    assert embedder.calls == ["What is IAM?"]
    assert index.queries == [([12.0, 1.0], 5)]


@pytest.mark.parametrize(
    "embedder, index",
    [
        (_FakeEmbedder(error=EmbeddingFailure("quota exceeded")), _FakeIndex(["unused"])),
        (_FakeEmbedder(), _FakeIndex(query_error=IndexQueryFailure("index unavailable"))),
    ],
)
def test_retrieval_failure_falls_back_to_bare_question(embedder, index):
    generator = _FakeGenerator("EC2 is virtual machines.")
    service = _service(embedder=embedder, index=index, generator=generator)

    record = service.ask(user="bob", question="What is EC2?")

    assert generator.prompts == ["What is EC2?"]
    assert record.question == "What is EC2?"
    assert record.answer == "EC2 is virtual machines."


def test_retrieve_context_reports_failure_as_result():
    error = EmbeddingFailure("quota exceeded")
    service = _service(embedder=_FakeEmbedder(error=error))

    result = service.retrieve_context("What is EC2?")

    assert not result.ok
    assert result.error is error
    assert result.context == []


def test_empty_index_uses_bare_question():
    generator = _FakeGenerator()
    service = _service(index=_FakeIndex([]), generator=generator)

    service.ask(user="alice", question="What is VPC?")

    assert generator.prompts == ["What is VPC?"]


def test_generation_failure_aborts_without_persisting():
    repository = InMemoryNotesRepository()
    service = _service(
        generator=_FakeGenerator(error=GenerationFailure("HTTP 500")),
        repository=repository,
    )

    with pytest.raises(GenerationFailure):
        service.ask(user="alice", question="What is S3?")

    assert repository.list_history("alice") == []


def test_persistence_failure_is_fatal_for_ask():
    service = _service(repository=_FailingRepository())

    with pytest.raises(PersistenceFailure):
        service.ask(user="alice", question="What is S3?")


def test_saving_memo_twice_keeps_one_index_record_per_user():
    index = _FakeIndex()
    repository = InMemoryNotesRepository()
    service = _service(index=index, repository=repository)

    service.save_memo(user="alice", content="Notes v1")
    service.save_memo(user="alice", content="Notes v2")

    assert list(index.records) == [memo_index_id("alice")]
    assert index.records[memo_index_id("alice")][1] == "Notes v2"
    assert repository.get_memo("alice") == "Notes v2"


def test_memo_index_id_depends_only_on_user():
    assert memo_index_id("alice") == memo_index_id("alice") == "memo_alice"
    assert memo_index_id("alice") != memo_index_id("bob")


@pytest.mark.parametrize(
    "embedder, index",
    [
        (_FakeEmbedder(error=EmbeddingFailure("quota exceeded")), _FakeIndex()),
        (_FakeEmbedder(), _FakeIndex(upsert_error=IndexWriteFailure("HTTP 400"))),
    ],
)
def test_memo_sync_failure_does_not_change_outcome(embedder, index):
    repository = InMemoryNotesRepository()
    service = _service(embedder=embedder, index=index, repository=repository)

    outcome = service.save_memo(user="alice", content="Notes v1")

    assert outcome.content == "Notes v1"
    assert repository.get_memo("alice") == "Notes v1"
    assert index.records == {}


def test_blank_memo_is_saved_but_not_indexed():
    embedder, index = _FakeEmbedder(), _FakeIndex()
    repository = InMemoryNotesRepository()
    service = _service(embedder=embedder, index=index, repository=repository)

    service.save_memo(user="alice", content="   ")
    service.save_memo(user="bob", content=None)

    assert embedder.calls == []
    assert index.records == {}
    assert repository.get_memo("alice") == "   "
    assert repository.get_memo("bob") == ""


def test_memo_persistence_failure_skips_index_sync():
    embedder, index = _FakeEmbedder(), _FakeIndex()
    service = _service(embedder=embedder, index=index, repository=_FailingRepository())

    with pytest.raises(PersistenceFailure):
        service.save_memo(user="alice", content="Notes v1")

    assert embedder.calls == []
    assert index.records == {}


def test_memo_and_history_reads():
    service = _service()

    assert service.memo("carol") == ""
    service.save_memo(user="carol", content="Lambda notes")
    first = service.ask(user="carol", question="What is Lambda?")
    second = service.ask(user="carol", question="What is SQS?")

    assert service.memo("carol") == "Lambda notes"
    assert [record.id for record in service.history("carol")] == [first.id, second.id]
    assert service.history("dave") == []


def test_unencodable_question_still_gets_answered_without_notes():
    import httpx

    from studypad.services.rag.embedding_client import EmbeddingClient

    def handler(request: httpx.Request) -> httpx.Response:
        raise UnicodeEncodeError("utf-8", "What is \ud800?", 8, 9, "surrogates not allowed")

    embedder = EmbeddingClient(
        Settings(GEMINI_API_KEY="key"),
        client=httpx.Client(base_url="https://gemini.test", transport=httpx.MockTransport(handler)),
    )
    generator = _FakeGenerator("An unpaired surrogate.")
    repository = InMemoryNotesRepository()
    service = _service(embedder=embedder, generator=generator, repository=repository)

    record = service.ask(user="alice", question="What is \ud800?")

    assert generator.prompts == ["What is \ud800?"]
    assert record.answer == "An unpaired surrogate."
    assert repository.list_history("alice") == [record]


def test_memo_sync_encoding_error_keeps_memo_saved():
    import httpx

    from studypad.services.rag.embedding_client import EmbeddingClient

    def handler(request: httpx.Request) -> httpx.Response:
        raise UnicodeEncodeError("utf-8", "notes \ud800", 6, 7, "surrogates not allowed")

    embedder = EmbeddingClient(
        Settings(GEMINI_API_KEY="key"),
        client=httpx.Client(base_url="https://gemini.test", transport=httpx.MockTransport(handler)),
    )
    index = _FakeIndex()
    repository = InMemoryNotesRepository()
    service = _service(embedder=embedder, index=index, repository=repository)

    outcome = service.save_memo(user="alice", content="notes \ud800")

    assert outcome.content == "notes \ud800"
    assert repository.get_memo("alice") == "notes \ud800"
    assert index.records == {}
