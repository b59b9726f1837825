import logging

from fastapi import FastAPI

from studypad.api.routes import gpt, health, memo


def create_app() -> FastAPI:
    logging.basicConfig(level=logging.INFO)

    application = FastAPI(title="Studypad RAG API", version="0.1.0")
    application.include_router(health.router)
    application.include_router(gpt.router)
    application.include_router(memo.router)

    return application


app = create_app()
