"""FastAPI application entrypoint.

Responsibilities kept minimal:
  * App / lifespan initialization (structured logging)
  * Router registration (heatmap, events, geometry, sessions)
  * Cross-cutting concerns: metrics middleware & exception handlers
"""

from contextlib import asynccontextmanager
import os
import time
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

from .api.events import router as events_router
from .api.heatmap import router as heatmap_router
from .api.geometry import router as geometry_router
from .api.sessions import router as sessions_router, get_editing_service
from .errors import BaseAppException
from .infrastructure.observability.logging import get_logger, log_request, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - simple startup path
    setup_logging()
    logger.info("votegrid starting")
    yield
    get_editing_service().store.clear()


app = FastAPI(title="Vote Grid API", version="0.1.0", lifespan=lifespan)

# --- Metrics setup ---
REQUEST_COUNT = Counter(
    "votegrid_requests_total", "Total HTTP requests", ["method", "path", "status"]
)
REQUEST_LATENCY = Histogram(
    "votegrid_request_latency_seconds", "Latency of HTTP requests", ["method", "path"]
)

# --- CORS (for local frontend dev) ---
cors_origins_env = os.getenv("CORS_ALLOW_ORIGINS")
if cors_origins_env:
    allow_origins = [o.strip() for o in cors_origins_env.split(",") if o.strip()]
else:
    allow_origins = ["http://localhost:8081", "http://localhost:19006"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Register routers once ---
app.include_router(heatmap_router)
app.include_router(events_router)
app.include_router(geometry_router)
app.include_router(sessions_router)


def _path_label(path: str) -> str:
    # collapse ids so label cardinality stays bounded
    for prefix in ("/sessions/", "/events/"):
        if path.startswith(prefix) and len(path) > len(prefix):
            rest = path[len(prefix):].split("/", 1)
            return prefix + ":id" + ("/" + rest[1] if len(rest) > 1 else "")
    return path


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    path_label = _path_label(request.url.path)
    method = request.method
    started = time.perf_counter()
    with REQUEST_LATENCY.labels(method=method, path=path_label).time():
        response: Response = await call_next(request)
    REQUEST_COUNT.labels(method=method, path=path_label, status=str(response.status_code)).inc()
    log_request(method, path_label, response.status_code, round((time.perf_counter() - started) * 1000, 2))
    return response


@app.get("/metrics")
def metrics():  # pragma: no cover - external scrape
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.exception_handler(BaseAppException)
async def app_exception_handler(request: Request, exc: BaseAppException):
    return JSONResponse(
        status_code=exc.http_status,
        content={"detail": {"code": exc.code, "message": exc.message}},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):  # pragma: no cover
    logger.error("Unhandled error", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=500,
        content={"detail": {"code": "INTERNAL_ERROR", "message": "unexpected error"}},
    )


@app.get("/healthz")
async def health():
    return {"status": "ok", "sessions": get_editing_service().store.size()}
