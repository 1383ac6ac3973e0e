"""
POS API main application.
Entry point for the FastAPI server.
"""

from fastapi import Depends, FastAPI
from sqlalchemy.orm import Session

from pos_api.core.cors import configure_cors
from pos_api.core.errors import register_exception_handlers
from pos_api.core.lifespan import lifespan
from pos_api.core.middlewares import register_middlewares
from pos_api.routers.auth import router as auth_router
from pos_api.routers.menu import router as menu_router
from pos_api.routers.orders import router as orders_router
from pos_api.routers.payments import router as payments_router
from pos_api.routers.reports import router as reports_router
from pos_api.routers.staff import router as staff_router
from pos_api.routers.tables import router as tables_router
from pos_shared.config.settings import settings
from pos_shared.infrastructure.db import get_db, ping
from pos_shared.security.rate_limit import limiter
from pos_shared.utils.schemas import HealthResponse


app = FastAPI(
    title="Mag7 POS API",
    description="Restaurant point-of-sale API: tables, orders, payments, staff",
    version="0.1.0",
    lifespan=lifespan,
)

app.state.limiter = limiter
register_exception_handlers(app)
register_middlewares(app)
configure_cors(app)


# =============================================================================
# Health Check
# =============================================================================


@app.get("/api/health", response_model=HealthResponse)
def health_check(db: Session = Depends(get_db)) -> HealthResponse:
    """Liveness plus database reachability."""
    database_ok = ping(db)
    return HealthResponse(
        status="healthy" if database_ok else "degraded",
        database="up" if database_ok else "down",
        environment=settings.environment,
    )


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(auth_router)
app.include_router(tables_router)
app.include_router(menu_router)
app.include_router(orders_router)
app.include_router(payments_router)
app.include_router(staff_router)
app.include_router(reports_router)


# =============================================================================
# Development entry point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "pos_api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
