# Main application file



import logging
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from medstock.database import engine, Base
from medstock.core.rate_limiter import limiter
from medstock.core.config import settings
from medstock.core.exceptions import InventoryError
from medstock.models import (  # noqa: F401 - register tables on Base
    ambulance_post,
    cabinet,
    cabinet_location,
    category,
    drawer,
    item,
    item_location,
    post_cabinet_order,
    post_contact,
    supply_request,
)
from medstock.routers import (
    medical_items,
    cabinets,
    drawers,
    ambulance_posts,
    cabinet_locations,
    item_locations,
    post_contacts,
    categories,
    supply_requests,
    email_settings,
    backup,
    exports,
    objects,
)


# LOGGING CONFIGURATION

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)s | %(message)s",
)

logger = logging.getLogger("medstock")


# DATABASE

Base.metadata.create_all(bind=engine)


# APP INIT

app = FastAPI(
    title="Medical Inventory API",
    description="Medical supply inventory for ambulance posts: items, cabinets, stock status and restock emails",
    version="1.0.0",
)



# CORS

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Content-Type"],
)


# RATE LIMITING

app.state.limiter = limiter
app.add_exception_handler(
    RateLimitExceeded,
    _rate_limit_exceeded_handler
)


# ERROR HANDLING

@app.exception_handler(InventoryError)
async def inventory_error_handler(request: Request, exc: InventoryError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
    else:
        logger.info(
            f"{request.method} {request.url.path} rejected "
            f"({exc.status_code}): {exc.detail}"
        )

    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"] if part != "body")
        messages.append(f"{location}: {error['msg']}" if location else error["msg"])

    return JSONResponse(status_code=400, content={"detail": "; ".join(messages)})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(
        f"Unhandled error on {request.method} {request.url.path}: {type(exc).__name__}: {exc}",
        exc_info=exc,
    )

    return JSONResponse(
        status_code=500,
        content={"detail": "An internal error occurred. Please try again later."},
    )


# REQUEST LOGGING MIDDLEWARE

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()

    response = await call_next(request)

    duration = round((time.time() - start_time) * 1000, 2)

    logger.info(
        f"{request.method} {request.url.path} "
        f"Status: {response.status_code} "
        f"Time: {duration}ms"
    )

    return response


# ROUTERS

app.include_router(medical_items.router)
app.include_router(cabinets.router)
app.include_router(drawers.router)
app.include_router(ambulance_posts.router)
app.include_router(cabinet_locations.router)
app.include_router(item_locations.router)
app.include_router(post_contacts.router)
app.include_router(categories.router)
app.include_router(supply_requests.router)
app.include_router(email_settings.router)
app.include_router(backup.router)
app.include_router(exports.router)
app.include_router(objects.router)



# ROOT

@app.get("/")
def root():
    logger.info("Health check endpoint called")
    return {"message": "Medical Inventory API is running"}
