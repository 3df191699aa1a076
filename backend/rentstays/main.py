"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from rentstays.config import settings
from rentstays.database import Base, engine
from rentstays.errors import BookingError

# Import routers
from rentstays.routers import properties, bookings, activities

# Import all models so Base.metadata knows about them
from rentstays.models.property import Property                        # noqa: F401
from rentstays.models.booking import Booking                          # noqa: F401
from rentstays.models.booking_status_change import BookingStatusChange  # noqa: F401
from rentstays.models.activity import Activity                        # noqa: F401

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Rent Stays",
    description="Student accommodation marketplace: booking requests and owner approval workflow",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Register routers
app.include_router(properties.router, prefix="/api/properties", tags=["Properties"])
app.include_router(bookings.router, prefix="/api/bookings", tags=["Bookings"])
app.include_router(activities.router, prefix="/api/activities", tags=["Activities"])


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
