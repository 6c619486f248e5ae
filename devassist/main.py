"""
Developer Assistant - FastAPI Application

Thin HTTP surface over the suggestion pipeline and the code store.
"""

import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from pydantic import BaseModel, Field

from devassist.config import Settings, settings
from devassist.llm.provider import LLMProvider, get_llm_provider
from devassist.pipeline.enhancer import SnippetEnhancer
from devassist.pipeline.models import PipelineContext
from devassist.pipeline.orchestrator import SuggestionPipeline
from devassist.realtime.publisher import QueuePublisher
from devassist.scheduler import RetentionScheduler
from devassist.storage.code_store import CodeStore

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str) -> None:
    """Install a single stream handler on the package logger."""
    package_logger = logging.getLogger("devassist")
    package_logger.setLevel(level)

    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(handler)


# ============================================================================
# Request Models
# ============================================================================


class ProcessRequest(BaseModel):
    text: str = ""
    source_app: str = "unknown"
    file_path: Optional[str] = None
    language: Optional[str] = None


class SnippetCreateRequest(BaseModel):
    content: str = Field(min_length=1)
    source_app: str = "unknown"
    language: Optional[str] = None
    file_path: Optional[str] = None


class FavoriteRequest(BaseModel):
    favorited: bool = True


class CleanupRequest(BaseModel):
    days_to_keep: Optional[int] = Field(default=None, ge=0)


# ============================================================================
# Dependencies
# ============================================================================


def get_store(request: Request) -> CodeStore:
    return request.app.state.store


def get_pipeline(request: Request) -> SuggestionPipeline:
    return request.app.state.pipeline


def get_enhancer(request: Request) -> SnippetEnhancer:
    return request.app.state.enhancer


def get_publisher(request: Request) -> QueuePublisher:
    return request.app.state.publisher


# ============================================================================
# Application Factory
# ============================================================================


def _wire(app: FastAPI, config: Settings) -> None:
    store = app.state.store
    provider = app.state.llm_provider
    app.state.pipeline = SuggestionPipeline.from_settings(store, provider, config)
    app.state.enhancer = SnippetEnhancer(store, provider)


def create_app(
    store: Optional[CodeStore] = None,
    llm_provider: Optional[LLMProvider] = None,
    config: Optional[Settings] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Injected collaborators are used as-is and are not torn down on shutdown.
    Missing ones are created from settings in the lifespan handler.

    Args:
        store: Initialized code store
        llm_provider: Completion provider
        config: Settings (global settings when omitted)
    """
    config = config or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(config.log_level)

        owns_store = app.state.store is None
        if owns_store:
            app.state.store = CodeStore(config.database_url)
            app.state.store.init()

        owns_provider = app.state.llm_provider is None
        if owns_provider:
            app.state.llm_provider = get_llm_provider(config)

        _wire(app, config)

        scheduler = None
        if owns_store and config.enable_retention_job:
            scheduler = RetentionScheduler(app.state.store, days_to_keep=config.retention_days)
            scheduler.start()

        try:
            yield
        finally:
            if scheduler is not None:
                scheduler.stop()
            if owns_provider:
                await app.state.llm_provider.aclose()
                app.state.llm_provider = None
            if owns_store:
                app.state.store.close()
                app.state.store = None

    app = FastAPI(
        title="Developer Assistant",
        description="Screen-aware error detection, code suggestions and snippet recall",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.store = store
    app.state.llm_provider = llm_provider
    app.state.publisher = QueuePublisher()

    if store is not None and llm_provider is not None:
        _wire(app, config)

    @app.get("/health")
    async def health():
        """
        Health check endpoint.

        Returns:
            dict: Status indicator showing the service is healthy
        """
        return {"status": "healthy"}

    @app.post("/process")
    async def process(
        body: ProcessRequest,
        pipeline: SuggestionPipeline = Depends(get_pipeline),
        publisher: QueuePublisher = Depends(get_publisher),
    ):
        """
        Run the suggestion pipeline on a piece of text.

        The merged result is returned and also published to real-time
        subscribers.
        """
        result = await pipeline.process(
            body.text,
            PipelineContext(
                source_app=body.source_app,
                file_path=body.file_path,
                language=body.language,
            ),
        )
        payload = result.to_dict()
        await publisher.publish({"type": "process_result", "data": payload})
        return payload

    @app.get("/snippets")
    async def list_snippets(
        language: Optional[str] = None,
        search: Optional[str] = None,
        limit: Optional[int] = Query(default=None, ge=1, le=500),
        store: CodeStore = Depends(get_store),
    ) -> List[dict]:
        snippets = store.get_snippets(language=language, search_term=search, limit=limit)
        return [s.to_dict() for s in snippets]

    @app.post("/snippets", status_code=status.HTTP_201_CREATED)
    async def create_snippet(
        body: SnippetCreateRequest,
        enhancer: SnippetEnhancer = Depends(get_enhancer),
    ):
        """Save a snippet with generated tags and language."""
        snippet = await enhancer.create_enhanced_snippet(
            body.content,
            source_app=body.source_app,
            language=body.language,
            file_path=body.file_path,
        )
        return snippet.to_dict()

    @app.post("/snippets/{snippet_id}/favorite")
    async def favorite_snippet(
        snippet_id: str,
        body: FavoriteRequest,
        store: CodeStore = Depends(get_store),
    ):
        snippet = store.set_favorited(snippet_id, body.favorited)
        if snippet is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Snippet {snippet_id} not found",
            )
        return snippet.to_dict()

    @app.get("/context")
    async def current_context(store: CodeStore = Depends(get_store)):
        context = store.get_current_context()
        if context is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No developer context recorded yet",
            )
        return context.to_dict()

    @app.get("/errors/solutions")
    async def error_solutions(
        error_text: str = Query(min_length=1),
        language: str = Query(min_length=1),
        store: CodeStore = Depends(get_store),
    ) -> List[dict]:
        return [p.to_dict() for p in store.get_error_solutions(error_text, language)]

    @app.post("/maintenance/cleanup")
    async def cleanup(
        body: CleanupRequest,
        request: Request,
        store: CodeStore = Depends(get_store),
    ):
        """Run the retention sweep now."""
        days = body.days_to_keep
        if days is None:
            days = request.app.state.config.retention_days
        deleted = store.cleanup_old_data(days)
        return {"status": "ok", "days_to_keep": days, "deleted": deleted}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
