import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from surveykit import models  # noqa: F401  registers tables on Base.metadata
from surveykit.core.config import settings
from surveykit.core.db import engine, Base
from surveykit.core.errors import InternalError, SurveyError
from surveykit.api.auth import router as auth_router
from surveykit.api.stats import router as stats_router
from surveykit.api.surveys import router as surveys_router
from surveykit.api.submissions import router as submissions_router

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="SurveyKit API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create tables on startup
Base.metadata.create_all(bind=engine)

@app.exception_handler(SurveyError)
def survey_error_handler(request: Request, exc: SurveyError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

@app.exception_handler(SQLAlchemyError)
def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}", exc_info=exc)
    error = InternalError()
    return JSONResponse(status_code=error.status_code, content=error.to_dict())

@app.exception_handler(RequestValidationError)
def request_validation_handler(request: Request, exc: RequestValidationError):
    fields = [
        ".".join(str(part) for part in err["loc"] if part != "body")
        for err in exc.errors()
    ]
    logger.debug(f"Rejected malformed request to {request.url.path}: {fields}")
    return JSONResponse(
        status_code=400,
        content={"kind": "validation", "message": "Invalid request data", "fields": fields},
    )

app.include_router(auth_router)
app.include_router(surveys_router)
app.include_router(submissions_router)
app.include_router(stats_router)

@app.get("/health")
def health():
    return {"ok": True}
