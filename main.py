# main.py
import logging
import time

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from config.logging import configure_logging
from config.settings import settings
from database.connection import create_all_tables
from modules.common.errors import register_exception_handlers
from modules.common.ratelimit import RateLimitMiddleware
from modules.security.deps import get_current_user

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger("main")

# ----- App instance -----
app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION)


# ----- Middlewares -----
class RequestLogMiddleware(BaseHTTPMiddleware):
    """one line per request: method, path, status, duration"""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s -> %s (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms
        )
        return response


if settings.RATE_LIMIT_ENABLED:
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
        window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
    )
app.add_middleware(RequestLogMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# ----- Routers -----
from modules.competencies import routes as competency_routes
from modules.dashboard import routes as dashboard_routes
from modules.employees import routes as employee_routes
from modules.goals import routes as goal_routes
from modules.performance import routes as performance_routes
from modules.security.auth_routes import router as auth_router
from modules.security.routes import api as users_api
from modules.security.bootstrap import ensure_default_admin

# the bearer check runs before any handler of these routers
protected = [Depends(get_current_user)]

app.include_router(auth_router)
app.include_router(users_api)

app.include_router(
    employee_routes.api_router, prefix="/api/employees", tags=["Employees"], dependencies=protected
)
app.include_router(
    performance_routes.api_router, prefix="/api/performance", tags=["Performance"], dependencies=protected
)
app.include_router(goal_routes.api_router, prefix="/api/goals", tags=["Goals"], dependencies=protected)
app.include_router(
    competency_routes.api_router, prefix="/api/competencies", tags=["Competencies"], dependencies=protected
)
app.include_router(
    dashboard_routes.api_router, prefix="/api/dashboard", tags=["Dashboard"], dependencies=protected
)


# ----- Startup -----
@app.on_event("startup")
def on_startup():
    create_all_tables()
    ensure_default_admin()
    logger.info("%s %s started (%s)", settings.APP_NAME, settings.APP_VERSION, settings.ENVIRONMENT)


# ----- Public routes -----
@app.get("/", include_in_schema=False)
def root():
    return {"message": settings.APP_NAME, "version": settings.APP_VERSION}


@app.get("/health", tags=["Health"])
def health():
    return {"status": "OK", "environment": settings.ENVIRONMENT}


# ----- Entrypoint -----
if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=5000, reload=True)
