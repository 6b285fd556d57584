# backend/carservice/main.py

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import settings
from .routers import admin_bays, admin_bookings, admin_calendar, bookings
from .services.errors import BookingError

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Car Service Booking API")

app.include_router(bookings.router)
app.include_router(admin_bookings.router)
app.include_router(admin_calendar.router)
app.include_router(admin_bays.router)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    # Domain errors carry a user-safe message; internals stay in the log
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "code": exc.code.value},
    )


@app.get("/health")
def health():
    return {"status": "ok", "service": "carservice-booking"}
