"""Bulk-load a folder of Markdown notes into the vector index.

Usage::

    studypad-ingest ~/notes/aws --pattern "*.md" --delay 0.5
"""

from __future__ import annotations

import argparse
import base64
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from studypad.core.config import get_settings
from studypad.core.errors import RetrievalError
from studypad.services.rag.embedding_client import EmbeddingClient
from studypad.services.rag.service import index_text
from studypad.services.rag.vector_client import VectorIndexClient

logger = logging.getLogger(__name__)


@dataclass
class IngestReport:
    indexed: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


def file_index_id(filename: str) -> str:
    """Index id for an ingested file; standard base64 of the file name."""

    encoded = base64.b64encode(filename.encode("utf-8")).decode("ascii")
    return f"file_{encoded}"


def ingest_directory(
    directory: Path,
    *,
    embedding_client: EmbeddingClient,
    vector_client: VectorIndexClient,
    pattern: str = "*.md",
    delay: float = 0.5,
    sleep: Callable[[float], None] = time.sleep,
) -> IngestReport:
    if not directory.is_dir():
        raise FileNotFoundError(f"not a directory: {directory}")

    report = IngestReport()
    files = sorted(path for path in directory.glob(pattern) if path.is_file())
    logger.info("Ingestion started | directory=%s | files=%d", directory, len(files))

    for position, path in enumerate(files):
        try:
            content = path.read_text(encoding="utf-8")
            index_text(embedding_client, vector_client, file_index_id(path.name), content)
        except (OSError, UnicodeDecodeError, RetrievalError) as exc:
            logger.warning("Ingestion failed | file=%s | reason=%s", path.name, exc)
            report.failed.append(path.name)
        else:
            logger.info("Ingested | file=%s", path.name)
            report.indexed.append(path.name)

        # Stay under the embedding API rate limit.
        if delay > 0 and position + 1 < len(files):
            sleep(delay)

    logger.info(
        "Ingestion finished | indexed=%d | failed=%d",
        len(report.indexed),
        len(report.failed),
    )
    return report


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Load Markdown notes into the vector index.")
    parser.add_argument("directory", type=Path)
    parser.add_argument("--pattern", default="*.md")
    parser.add_argument("--delay", type=float, default=0.5)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)

    settings = get_settings()
    embedding_client = EmbeddingClient(settings)
    vector_client = VectorIndexClient(settings)
    try:
        report = ingest_directory(
            args.directory,
            embedding_client=embedding_client,
            vector_client=vector_client,
            pattern=args.pattern,
            delay=args.delay,
        )
    except FileNotFoundError as exc:
        logger.error("%s", exc)
        return 2
    finally:
        embedding_client.close()
        vector_client.close()

    print(f"{len(report.indexed)} files indexed, {len(report.failed)} failed")
    return 1 if report.failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
