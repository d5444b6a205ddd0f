import logging

from apscheduler.schedulers.background import BackgroundScheduler
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.routers import (
    health, friends, watchlists, watched, email_watchlist, favorite_actors,
    movies, people, ua_services, imdb, recommendations
)
from app.core.config import get_settings
from app.db import Base, engine
from app.scrapers.proxies import get_proxy_pool
from app import models  # ensure models are imported

settings = get_settings()
logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Kinotrack API",
    description="Movie discovery, watchlists and friends",
    version="1.0.0"
)

origins_env = settings.CORS_ALLOW_ORIGINS or ""
origins = [o.strip() for o in origins_env.split(",") if o.strip()] or [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        location = first.get("loc", ())
        if location and location[0] == "path":
            message = f"Invalid {location[-1]}"
        else:
            field = ".".join(str(part) for part in location[1:])
            message = f"{field}: {first.get('msg')}" if field else first.get("msg", message)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


app.include_router(health.router)
app.include_router(friends.router)
app.include_router(watchlists.router)
app.include_router(watched.router)
app.include_router(email_watchlist.router)
app.include_router(favorite_actors.router)
app.include_router(movies.router)
app.include_router(people.router)
app.include_router(ua_services.router)
app.include_router(imdb.router)
app.include_router(recommendations.router)

scheduler = None

if settings.ENABLE_SCHEDULER:
    scheduler = BackgroundScheduler(timezone="UTC")

    def job_refresh_proxies():
        try:
            proxies = get_proxy_pool().refresh()
            logger.info(f"Proxy pool refreshed with {len(proxies)} proxies")
        except Exception as e:
            logger.error(f"Proxy refresh failed: {str(e)}")

    scheduler.add_job(
        job_refresh_proxies,
        trigger="interval",
        minutes=settings.PROXY_REFRESH_MINUTES,
        id="proxy_refresh",
        replace_existing=True,
    )
    scheduler.start()


@app.on_event("startup")
async def init_db():
    # Idempotent, meant for first deploys and local development
    if settings.AUTO_CREATE_TABLES:
        Base.metadata.create_all(bind=engine)


@app.on_event("shutdown")
async def stop_scheduler():
    if scheduler is not None:
        scheduler.shutdown(wait=False)
