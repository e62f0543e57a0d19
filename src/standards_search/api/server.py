"""
FastAPI application for the standards search service.

Provides the REST endpoints consumed by the standards reader frontend,
with consistent {"error": ...} bodies for every failure.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Depends, Request, status
from fastapi import Query as QueryParam
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..config import Settings
from ..core.exceptions import StandardsSearchError, ValidationError, NotFoundError
from ..models.query import SearchRequestModel, ProcessRequestModel
from ..utils.logging_config import setup_logging
from .service import StandardsService

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


def get_service(request: Request) -> StandardsService:
    """Dependency returning the service owned by the application lifespan."""
    return request.app.state.service


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def register_exception_handlers(app: FastAPI) -> None:
    """Map service exceptions onto client and server error responses."""

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return _error(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return _error(status.HTTP_404_NOT_FOUND, str(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        fields = [".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()]
        logger.debug(f"Rejected request to {request.url.path}: {fields}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid request parameters", "fields": fields},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(StandardsSearchError)
    async def service_error_handler(request: Request, exc: StandardsSearchError):
        logger.error(f"Service error on {request.url.path}: {exc}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.url.path}", exc_info=exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_routes(app: FastAPI) -> None:
    """Mount the /api routes. Plain handlers run the corpus scans in the threadpool."""

    @app.get(f"{API_PREFIX}/health", summary="Health Check")
    async def health_check(service: StandardsService = Depends(get_service)):
        return await service.health_check()

    @app.get(f"{API_PREFIX}/standards", summary="List Standards")
    def list_standards(service: StandardsService = Depends(get_service)):
        return service.list_standards()

    @app.get(f"{API_PREFIX}/search", summary="Search All Standards")
    def search_all(
        q: Optional[str] = QueryParam(None, description="Search text"),
        standardId: Optional[int] = QueryParam(None, description="Restrict to one standard"),
        type: Optional[str] = QueryParam(None, description="Restrict to a standard type"),
        limit: Optional[int] = QueryParam(None, ge=1, description="Maximum sections"),
        service: StandardsService = Depends(get_service),
    ):
        return service.search_all(q, standard_id=standardId, standard_type=type, limit=limit)

    @app.get(f"{API_PREFIX}/standards/{{standard_id}}", summary="Get Standard")
    def get_standard(
        standard_id: int,
        page: int = QueryParam(1, ge=1),
        limit: Optional[int] = QueryParam(None, ge=1),
        service: StandardsService = Depends(get_service),
    ):
        return service.get_standard(standard_id, page=page, limit=limit)

    @app.post(f"{API_PREFIX}/standards/{{standard_id}}/search", summary="Search Within Standard")
    def search_standard(
        standard_id: int,
        request: SearchRequestModel,
        service: StandardsService = Depends(get_service),
    ):
        return service.search_standard(standard_id, request.query, limit=request.limit)

    @app.get(f"{API_PREFIX}/sections/{{section_id}}", summary="Get Section")
    def get_section(section_id: int, service: StandardsService = Depends(get_service)):
        return service.get_section(section_id)

    @app.get(f"{API_PREFIX}/sections/{{section_id}}/adjacent", summary="Adjacent Sections")
    def get_adjacent(section_id: int, service: StandardsService = Depends(get_service)):
        return service.get_adjacent(section_id)

    @app.get(f"{API_PREFIX}/sections/{{section_id}}/related", summary="Related Sections")
    def get_related(
        section_id: int,
        limit: Optional[int] = QueryParam(None, ge=1),
        service: StandardsService = Depends(get_service),
    ):
        return service.related_sections(section_id, limit=limit)

    @app.get(f"{API_PREFIX}/compare", summary="Compare Standards On A Topic")
    def compare(
        topic: Optional[str] = QueryParam(None),
        standardIds: Optional[str] = QueryParam(None, description="Comma separated standard ids"),
        service: StandardsService = Depends(get_service),
    ):
        return service.compare(topic, standardIds)

    @app.get(f"{API_PREFIX}/insights", summary="Corpus Insights")
    def insights(service: StandardsService = Depends(get_service)):
        return service.insights()

    @app.get(f"{API_PREFIX}/comparison/topics", summary="Comparison Topics")
    def comparison_topics(service: StandardsService = Depends(get_service)):
        return service.comparison_topics()

    @app.get(f"{API_PREFIX}/comparison/topics/{{topic_id}}", summary="Compare Topic")
    async def compare_topic(topic_id: int, service: StandardsService = Depends(get_service)):
        return await service.compare_topic(topic_id)

    @app.post(f"{API_PREFIX}/process/generate", summary="Generate Tailored Process")
    async def generate_process(
        request: Optional[ProcessRequestModel] = None,
        service: StandardsService = Depends(get_service),
    ):
        return await service.generate_process(request or ProcessRequestModel())

    @app.get(f"{API_PREFIX}/stats", summary="Service Statistics")
    async def stats(service: StandardsService = Depends(get_service)):
        return await service.get_stats()


def create_app(settings: Optional[Settings] = None, service: Optional[StandardsService] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Configuration (environment by default)
        service: Pre-built service; when omitted one is constructed from
            settings on start-up and closed on shutdown

    Returns:
        Configured application
    """
    settings = settings or (service.settings if service else Settings())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.service = service or StandardsService(settings=settings)
        if not app.state.service.initialized:
            await app.state.service.initialize()
        logger.info("Standards API ready")

        yield

        await app.state.service.close()
        logger.info("Standards API stopped")

    app = FastAPI(
        title="Project Management Standards API",
        description="Search and compare project-management standards",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    register_routes(app)
    return app


def main() -> None:
    """Run the API server."""
    import uvicorn

    settings = Settings()
    setup_logging(level=settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
