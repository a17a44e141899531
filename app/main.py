import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from app.config import config
from app.database import Database
from app.endpoints import (
    bookings,
    check_ins,
    classes,
    health,
    instructors,
    qr,
    schedule,
    subscriptions,
)
from app.errors.gym_errors import GymError, ErrorKind, StoreError
from app.schemas.common import ErrorResponse, ErrorBody

logging.basicConfig(
    level=config.LOG_LEVEL.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.INVALID: 400,
    ErrorKind.CONFLICT: 400,
    ErrorKind.CAPACITY_EXCEEDED: 400,
    ErrorKind.EXPIRED: 410,
    ErrorKind.LIMIT_REACHED: 403,
    ErrorKind.STORE_ERROR: 500,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    # A database placed on app.state beforehand (tests, scripts) is used as is
    owns_database = getattr(app.state, "database", None) is None
    if owns_database:
        app.state.database = Database(config.SQLALCHEMY_DATABASE_URI)
        app.state.database.create_all()
    logger.info("Application started")
    try:
        yield
    finally:
        if owns_database:
            app.state.database.dispose()
            app.state.database = None


app = FastAPI(
    title="Gym Scheduling API",
    description="Class schedule, bookings and front desk check-in",
    version="1.0.0",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Регистрация маршрутов
app.include_router(health.router)
app.include_router(schedule.router, prefix="/api")
app.include_router(bookings.router, prefix="/api")
app.include_router(classes.router, prefix="/api")
app.include_router(instructors.router, prefix="/api")
app.include_router(qr.router, prefix="/api")
app.include_router(check_ins.router, prefix="/api")
app.include_router(subscriptions.plans_router, prefix="/api")
app.include_router(subscriptions.router, prefix="/api")


def error_response(exc: GymError) -> JSONResponse:
    body = ErrorResponse(error=ErrorBody(kind=exc.kind.value, message=exc.message), data=exc.data)
    return JSONResponse(status_code=ERROR_STATUS_CODES.get(exc.kind, 500), content=body.model_dump(mode="json"))


@app.exception_handler(GymError)
async def gym_error_handler(request: Request, exc: GymError):
    if exc.kind == ErrorKind.STORE_ERROR:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return error_response(exc)


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"Database error on {request.method} {request.url.path}")
    return error_response(StoreError())


# Обработка ошибок валидации
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        if 'ctx' in error and 'error' in error['ctx']:
            # Show the ValueError text instead of the unserializable exception
            if isinstance(error['ctx']['error'], ValueError):
                error['msg'] = str(error['ctx']['error'])
                del error['ctx']
        errors.append(error)

    return JSONResponse(
        status_code=422,
        content={"detail": errors},
    )
