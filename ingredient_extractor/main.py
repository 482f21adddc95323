import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ingredient_extractor.api.routes import router as api_router
from ingredient_extractor.config import Settings, load_settings
from ingredient_extractor.core.logging import setup_logging
from ingredient_extractor.core.middleware import RequestLoggingMiddleware
from ingredient_extractor.errors import ServiceError
from ingredient_extractor.utils.gemini_utils import IngredientExtractor
from ingredient_extractor.utils.sanitizer import HtmlSanitizer, ugc_policy

log = logging.getLogger(__name__)


async def service_error_handler(request: Request, exc: ServiceError):
    level = logging.WARNING if exc.status_code < 500 else logging.ERROR
    log.log(
        level,
        "%s %s failed: %s",
        request.method,
        request.url.path,
        exc.message,
        extra={"request_id": getattr(request.state, "request_id", None), "status_code": exc.status_code},
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


def create_app(
    settings: Optional[Settings] = None,
    sanitizer: Optional[HtmlSanitizer] = None,
    extractor: Optional[IngredientExtractor] = None,
) -> FastAPI:
    settings = settings or load_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title="Ingredient Extractor API")
    app.state.settings = settings
    app.state.sanitizer = sanitizer or ugc_policy()
    app.state.extractor = extractor or IngredientExtractor(settings.google_ai_api_key)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(ServiceError, service_error_handler)
    app.include_router(api_router)
    return app


app = create_app()


def serve(application: Optional[FastAPI] = None) -> None:
    application = application or app
    settings = application.state.settings
    log.info("listening on http://%s:%s", settings.host, settings.port)
    uvicorn.run(
        application,
        host=settings.host,
        port=settings.port,
        timeout_keep_alive=settings.read_timeout,
        timeout_graceful_shutdown=settings.shutdown_timeout,
    )


if __name__ == "__main__":
    serve()
