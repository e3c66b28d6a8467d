from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

from .core.errors import APIError
from .log_utils import inject_request_id, setup_logging
from .models import ErrorResponse
from .routers.api import api_router
from .routers.legacy import router as legacy_router


load_dotenv()

app = FastAPI(title="Wiki Delete", version="0.1.0")
setup_logging()

@app.middleware("http")
async def add_req_id(request, call_next):
    return await inject_request_id(request, call_next)

@app.exception_handler(APIError)
async def api_error_handler(request: Request, exc: APIError):
    body = ErrorResponse(code=exc.code, message=exc.message, details=exc.details)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = f"{location}: {first.get('msg', 'invalid request')}" if location else "invalid request"
    body = ErrorResponse(code="bad_request", message=message)
    return JSONResponse(status_code=400, content=body.model_dump())

app.include_router(api_router)
app.include_router(legacy_router)
