import logging
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.exc import OperationalError
from config import settings
from database.database import create_database_tables
from endpoints import auth, users, intakes, documents, audit_logs
from endpoints.dependencies import current_identity
from exceptions import PortalError, Unavailable, InternalError
from logic.access import route_decision

logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

create_database_tables() #call function to create database tables

app = FastAPI( #creates new FastAPI app instance
    title="Intake Review Portal", #title shown in docs
    description="Patient enrollment intake, reviewer triage and compliance audit trail",
)

app.include_router(auth.router) #include routers from endpoints
app.include_router(users.router)
app.include_router(intakes.router)
app.include_router(documents.router)
app.include_router(audit_logs.router)

@app.middleware("http")
async def page_access_gate(request: Request, call_next): #coarse pre-routing check for pages, resource endpoints check per operation
    decision = route_decision(request.url.path, current_identity(request))
    if not decision.allowed:
        return RedirectResponse(decision.redirect_to, status_code=307)
    return await call_next(request)

def error_response(error: PortalError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content={"detail": error.message, "error": error.kind})

@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return error_response(exc)

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={
        "detail": "Invalid request",
        "error": "validation",
        "errors": jsonable_encoder([{"loc": e["loc"], "msg": e["msg"], "type": e["type"]} for e in exc.errors()]),
    })

@app.exception_handler(OperationalError)
async def storage_unavailable_handler(request: Request, exc: OperationalError):
    logger.exception("Storage unavailable during %s %s", request.method, request.url.path)
    return error_response(Unavailable())

@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unexpected error during %s %s", request.method, request.url.path)
    return error_response(InternalError())

@app.get("/")
def portal_home():
    return {"Hello": "Intake Review Portal"}
