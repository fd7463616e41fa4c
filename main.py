import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

import database
from config import Settings, settings as default_settings
from logging_config import setup_logging
from schemas import VoteRequest
from services import ShowNotFound, ShowQueryService, VoteService

logger = logging.getLogger(__name__)

router = APIRouter()

# Dependencies

def get_collection(request: Request) -> Collection:
    return request.app.state.db[request.app.state.settings.collection_name]


def get_query_service(collection: Collection = Depends(get_collection)) -> ShowQueryService:
    return ShowQueryService(collection)


def get_vote_service(collection: Collection = Depends(get_collection)) -> VoteService:
    return VoteService(collection)


def not_found() -> HTTPException:
    return HTTPException(status_code=404, detail="Reality show not found")

# Routes

@router.get("/")
def root():
    return {"message": "Reality Show API running"}


@router.get("/health")
def health(request: Request):
    db = request.app.state.db
    try:
        collections = db.list_collection_names()
    except PyMongoError as e:
        logger.error("Health check failed: %s", e)
        return JSONResponse(status_code=503, content={"status": "error", "database": "unreachable"})
    return {"status": "ok", "database": "connected", "collections": collections[:10]}


@router.get("/premios")
def premios(shows: ShowQueryService = Depends(get_query_service)):
    return shows.prize_summary()


@router.get("/idade/{nome_reality}")
def idade(nome_reality: str, shows: ShowQueryService = Depends(get_query_service)):
    try:
        return shows.age_extremes(nome_reality)
    except ShowNotFound:
        raise not_found()


@router.get("/maior/{valor}")
def maior(valor: float, shows: ShowQueryService = Depends(get_query_service)):
    return shows.prizes_at_least(valor)


@router.get("/total")
def total(shows: ShowQueryService = Depends(get_query_service)):
    return shows.total_prizes_per_show()


@router.get("/audiencia")
def audiencia(shows: ShowQueryService = Depends(get_query_service)):
    return shows.audience_per_broadcaster()


@router.post("/votar")
def votar(vote: VoteRequest, votes: VoteService = Depends(get_vote_service)):
    try:
        return votes.register_vote(vote.reality, vote.participante)
    except ShowNotFound:
        raise not_found()
    except (PyMongoError, ValidationError):
        logger.exception("Failed to register vote for %r in %r", vote.participante, vote.reality)
        raise HTTPException(status_code=500, detail="Failed to register vote")


@router.get("/votos/{reality}")
def votos(reality: str, votes: VoteService = Depends(get_vote_service)):
    try:
        return votes.tally(reality)
    except ShowNotFound:
        raise not_found()
    except (PyMongoError, ValidationError):
        logger.exception("Failed to fetch votes for %r", reality)
        raise HTTPException(status_code=500, detail="Failed to fetch votes")

# App

def create_app(db: Optional[Database] = None, settings: Optional[Settings] = None) -> FastAPI:
    """Build the API.

    When ``db`` is given it is used as-is and no connection is attempted at
    startup.  Otherwise the lifespan hook connects using ``settings``; if
    that fails the app keeps running and answers every request with 503.
    """
    settings = settings or default_settings
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_connection = app.state.db is None
        if owns_connection:
            try:
                app.state.db = database.connect(settings)
            except database.DatabaseConnectionError:
                logger.error("Database unavailable, refusing requests with 503")
        yield
        if owns_connection:
            database.close(app.state.db)
            app.state.db = None

    app = FastAPI(title="Reality Show API", lifespan=lifespan)
    app.state.db = db
    app.state.settings = settings

    @app.middleware("http")
    async def require_database(request: Request, call_next):
        if request.app.state.db is None:
            return JSONResponse(status_code=503, content={"detail": "Database not connected"})
        return await call_next(request)

    # Outermost, so 503 responses carry CORS headers too
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(PyMongoError)
    @app.exception_handler(ValidationError)
    async def internal_error(request: Request, exc: Exception):
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    app.include_router(router)
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=default_settings.host, port=default_settings.port)
