from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from timing_asgi import TimingMiddleware, TimingClient  # type: ignore
from timing_asgi.integrations import StarletteScopeToName  # type: ignore

from app.core import config
from app.core.database.engine import SessionLocal, init_db
from app.core.rate_limit import limiter
from app.core.storage import SQLStorage
from app.features.assignments.persistence import AssignmentPersistence
from app.features.assignments.routes import router as assignment_router
from app.features.assignments.seed import seed_demo_assignments
from app.features.assignments.store import AssignmentStore
from app.features.permissions.resolver import PermissionResolver
from app.features.permissions.routes import router as permission_router
from app.utils import get_logger


log = get_logger(__name__)
log.info("Initializing server")
app = FastAPI(
    title="CSU PMO Access Backend",
    description="Project staff assignments and access resolution for the facilities SPA",
    version="0.1.0",
    docs_url="/docs" if config.ENABLE_DOCS else None,
    redoc_url="/redoc" if config.ENABLE_DOCS else None,
    openapi_url="/openapi.json" if config.ENABLE_DOCS else None
)
app.state.limiter = limiter


class PrintTimings(TimingClient):
    def timing(self, metric_name, timing, tags):
        log.debug(dict(route=metric_name.removeprefix("main.app.features."), timing=timing, tags=tags))


app.add_middleware(TimingMiddleware, client=PrintTimings(), metric_namer=StarletteScopeToName("main", app))

if config.ENABLE_DOCS:
    log.warning("Docs enabled")
if not config.JWT_SECRET:
    if config.ALLOW_UNSIGNED_TOKENS:
        log.warning("JWT_SECRET unset and ALLOW_UNSIGNED_TOKENS on: token signatures are NOT checked")
    else:
        log.error("JWT_SECRET unset: every authenticated request will be refused")
if config.ALLOW_ORIGIN:
    log.warning("Setting allow origin to %s", config.ALLOW_ORIGIN)
    origins = [config.ALLOW_ORIGIN]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_request: Request, exc: RequestValidationError):
    errors = dict()
    for error in exc.errors():
        if "loc" not in error or "msg" not in error:
            continue
        key = error["loc"][-1]
        if key == "__root__":
            key = "root"
        errors[key] = error["msg"]
    log.info("Request validation error %s", errors)
    return JSONResponse(status_code=400, content=jsonable_encoder(errors))


@app.exception_handler(RateLimitExceeded)
def rate_limit_exceeded_handler(_request: Request, _exc: RateLimitExceeded) -> Response:
    return JSONResponse({"error": "You are going too fast"}, status_code=429)


def build_assignment_store(storage) -> AssignmentStore:
    """
    Load persisted assignments into a new store, then apply demo seeding.
    
    A failed load is logged and leaves the store empty.
    """
    store = AssignmentStore(AssignmentPersistence(storage, key=config.ASSIGNMENTS_STORAGE_KEY))
    result = store.load()
    if not result.ok:
        log.error("Starting with an empty assignment store: %s", result.error)
    seed_demo_assignments(store, config.SEED_DEMO_ASSIGNMENTS)
    return store


@app.on_event("startup")
async def startup():
    """Initialize storage and the assignment store on application startup."""
    log.info("Initializing database...")
    init_db()
    store = build_assignment_store(SQLStorage(SessionLocal))
    app.state.assignment_store = store
    app.state.permission_resolver = PermissionResolver(store)
    log.info("Assignment store ready with %d assignments", len(store))


@app.get("/")
async def root():
    """Root endpoint - API health check."""
    return {
        "message": "CSU PMO Access Backend",
        "version": "0.1.0",
        "status": "online",
        "docs": "/docs" if config.ENABLE_DOCS else None,
        "authentication": {
            "info": "All /assignments and /permissions endpoints require a Bearer token in the Authorization header",
        },
        "features": {
            "assignments": "Per-project staff assignments with edit/delete/document grants",
            "permissions": "Department-based page access and assignment-based project access",
        }
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


# Assignment routes
app.include_router(assignment_router, prefix="/assignments", tags=["assignments"])

# Permission routes
app.include_router(permission_router, prefix="/permissions", tags=["permissions"])
