# main.py
from dotenv import load_dotenv
load_dotenv()
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
import uvicorn
import logging

from personal_crm.core.database import init_db
from personal_crm.core.exceptions import (
    ApplicationException,
    DataInconsistencyException,
    DatabaseException,
    DuplicateException,
    NotFoundException,
    ValidationException,
)
from personal_crm.schemas.common import ErrorResponse
from personal_crm.api import (
    account_api_router,
    contacts_api_router,
    health_api_router,
    interactions_api_router,
    occasions_api_router,
    scheduling_api_router,
    tags_api_router,
)

logger = logging.getLogger("PERSONAL_CRM_APP")

app = FastAPI(title="Personal CRM")

# Most specific first; anything else derived from ApplicationException is a 500
ERROR_STATUS = [
    (ValidationException, 422, "validation_error"),
    (NotFoundException, 404, "not_found"),
    (DuplicateException, 409, "duplicate"),
    (DataInconsistencyException, 500, "data_inconsistency"),
    (DatabaseException, 500, "database_error"),
]


def error_status(exc: ApplicationException):
    for exc_type, status_code, error_code in ERROR_STATUS:
        if isinstance(exc, exc_type):
            return status_code, error_code
    return 500, "application_error"


@app.exception_handler(ApplicationException)
async def application_exception_handler(request: Request, exc: ApplicationException):
    status_code, error_code = error_status(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    body = ErrorResponse(error=exc.message, detail=exc.details, error_code=error_code)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


@app.on_event("startup")
def on_startup():
    init_db()


app.include_router(health_api_router)
app.include_router(contacts_api_router, prefix="/api")
app.include_router(tags_api_router, prefix="/api")
app.include_router(interactions_api_router, prefix="/api")
app.include_router(occasions_api_router, prefix="/api")
app.include_router(scheduling_api_router, prefix="/api")
app.include_router(account_api_router, prefix="/api")


@app.get("/")
async def root():
    return {"message": "Welcome to the Personal CRM Service"}


if __name__ == "__main__":
    import os

    env = os.getenv("ENVIRONMENT", "development").lower()

    if env == "production":
        uvicorn.run("personal_crm.main:app", host="0.0.0.0", port=9020, workers=4)
    else:
        # reload=True is incompatible with workers > 1
        uvicorn.run("personal_crm.main:app", host="0.0.0.0", port=9020, reload=True)
