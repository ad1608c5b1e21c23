"""
Main FastAPI application
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from foodsync.config import get_settings
from foodsync.database import engine, AsyncSessionLocal, create_tables
from foodsync.models import Account, Role
from foodsync.services.authenticator import hash_password
from foodsync.services.session_service import cleanup_expired_sessions
from foodsync.api import auth, accounts, admin, dashboard, directory, menu, orders
from foodsync.api import ratings, preferences, food_requests, packing_requests, pickup_requests
from foodsync.utils.logger import get_logger

settings = get_settings()
logger = get_logger(__name__)


async def seed_default_admin() -> None:
    """Create the bootstrap admin account when no admin exists"""
    async with AsyncSessionLocal() as session:
        result = await session.execute(select(Account.id).where(Account.role == Role.ADMIN).limit(1))
        if result.scalar_one_or_none() is None:
            session.add(Account(
                role=Role.ADMIN,
                display_name="Administrator",
                email=settings.DEFAULT_ADMIN_EMAIL,
                password_hash=hash_password(settings.DEFAULT_ADMIN_PASSWORD),
                verified=True,
            ))
            await session.commit()
            logger.info(f"Created default admin account {settings.DEFAULT_ADMIN_EMAIL}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables()
    logger.info("Database tables created")

    await seed_default_admin()
    async with AsyncSessionLocal() as session:
        await cleanup_expired_sessions(session)

    yield

    await engine.dispose()

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SQLAlchemyError)
async def record_store_error_handler(request: Request, exc: SQLAlchemyError):
    # No retry; the failing operation is simply reported
    logger.error(f"Record store error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Record store error, please try again"})


# Include routers
app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(accounts.router, prefix="/api/accounts", tags=["Accounts"])
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"])
app.include_router(directory.router, prefix="/api/directory", tags=["Directory"])
app.include_router(menu.router, prefix="/api/menu", tags=["Menu"])
app.include_router(orders.router, prefix="/api/orders", tags=["Orders"])
app.include_router(ratings.router, prefix="/api/ratings", tags=["Ratings"])
app.include_router(preferences.router, prefix="/api/preferences", tags=["Preferences"])
app.include_router(food_requests.router, prefix="/api/food-requests", tags=["Food Requests"])
app.include_router(packing_requests.router, prefix="/api/packing-requests", tags=["Packing Requests"])
app.include_router(pickup_requests.router, prefix="/api/pickup-requests", tags=["Pickup Requests"])


@app.get("/")
async def root():
    return {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running"
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "foodsync.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
