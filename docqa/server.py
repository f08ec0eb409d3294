import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from docqa.config import get_settings
from docqa.dependencies import AppServices
from docqa.errors import AppError, InputValidationError, StoreError, FATAL
from docqa.routes import files, query

logger = logging.getLogger(__name__)

def describe_validation_errors(errors) -> str:
    parts = []
    for e in errors:
        loc = ".".join(str(p) for p in e.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {e.get('msg')}" if loc else str(e.get("msg")))
    return "; ".join(parts) or "Invalid request"

def create_app(services: Optional[AppServices] = None) -> FastAPI:
    """
    Build the API. Pass ``services`` to run against pre-built collaborators;
    otherwise they are connected from settings when the app starts.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if services is not None:
            app.state.services = services
        else:
            settings = get_settings()
            logging.basicConfig(level=settings.LOG_LEVEL.upper())
            app.state.services = await AppServices.connect(settings)
        yield
        await app.state.services.close()

    app = FastAPI(title="Document Q&A API", version="1.0", lifespan=lifespan)

    app.include_router(files.router)
    app.include_router(query.router)

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.kind == FATAL:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        err = InputValidationError(describe_validation_errors(exc.errors()))
        return JSONResponse(status_code=err.status_code, content=err.to_dict())

    @app.exception_handler(PyMongoError)
    async def store_error_handler(request: Request, exc: PyMongoError):
        logger.exception(f"{request.method} {request.url.path} store error", exc_info=exc)
        err = StoreError(f"Store error: {exc}")
        return JSONResponse(status_code=err.status_code, content=err.to_dict())

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception(f"{request.method} {request.url.path} crashed", exc_info=exc)
        return JSONResponse(status_code=500, content={"error": str(exc) or "Internal error", "kind": FATAL})

    @app.get("/")
    def health():
        return {"status": "ok"}

    return app

app = create_app()

if __name__ == "__main__":
    import uvicorn
    import os
    port = int(os.getenv("PORT", 8000))
    # Only reload locally
    is_dev = os.getenv("RENDER") is None
    uvicorn.run("docqa.server:app", host="0.0.0.0", port=port, reload=is_dev)
