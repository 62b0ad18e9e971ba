import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import sessionmaker

from interview_prep.agents.runner import PipelineRunner
from interview_prep.api import routes_auth, routes_interview, routes_responses
from interview_prep.core.config import Settings, get_settings
from interview_prep.core.logging import setup_logging
from interview_prep.db.session import get_session_factory
from interview_prep.services.generation import GenerationClient, build_llm_provider
from interview_prep.services.job_store import JobStore
from interview_prep.services.page_fetcher import PageFetcher


def create_app(
    settings: Settings | None = None,
    *,
    session_factory: sessionmaker | None = None,
    generation_client: GenerationClient | None = None,
    fetcher: PageFetcher | None = None,
) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(logging.DEBUG if settings.debug else logging.INFO)
        store = JobStore(session_factory or get_session_factory(), settings)
        client = generation_client or GenerationClient(build_llm_provider(settings))
        runner = PipelineRunner(store, client, settings, fetcher=fetcher)

        app.state.settings = settings
        app.state.job_store = store
        app.state.generation_client = client
        app.state.runner = runner
        yield
        await runner.shutdown()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

    @app.get("/healthz")
    def healthz():
        return {"status": "ok", "service": settings.app_name}

    app.include_router(routes_auth.router)
    app.include_router(routes_interview.router)
    app.include_router(routes_responses.router)
    return app


app = create_app()
