from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
from app.core.config import settings
from app.core.database import engine, Base, SessionLocal
from app.core.error_handlers import register_error_handlers
from app.core.logging_config import setup_logging
from app.core.middleware import add_middleware
from app.core.seed import seed_database
from app.auth.routes import router as auth_router
from app.employees.routes import router as employees_router
from app.vaccines.routes import router as vaccines_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and load reference data on startup."""
    setup_logging(log_level=settings.log_level, log_file=settings.log_file)
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")

        if settings.seed_on_startup:
            db = SessionLocal()
            try:
                seed_database(db)
            finally:
                db.close()
    except Exception as e:
        logger.error(f"Error during startup: {e}")
        raise  # Re-raise to prevent app from starting with errors

    yield

    logger.info("Application shutting down...")


app = FastAPI(
    title=settings.app_name,
    description="Employee records, vaccination status and vaccine catalog for HR",
    version="1.0.0",
    debug=settings.debug,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure this properly for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)
add_middleware(app)

app.include_router(auth_router, prefix="/api/v1")
app.include_router(employees_router, prefix="/api/v1")
app.include_router(vaccines_router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "message": "Employee Vaccination Inventory API",
        "version": "1.0.0",
        "docs": "/docs",
        "endpoints": {
            "auth": "/api/v1/auth",
            "employees": "/api/v1/employees",
            "vaccines": "/api/v1/vaccines"
        }
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "message": "API is running"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
