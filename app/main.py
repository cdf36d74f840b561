import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from app.api.endpoints import auth as auth_endpoints
from app.api.endpoints import users as user_endpoints
from app.api.endpoints import events as event_endpoints
from app.api.endpoints import payments as payment_endpoints
from app.api.endpoints import uploads as upload_endpoints
from app.api.endpoints import demo as demo_endpoints
from app.core.config import settings
from app.core.database import Base, engine
import app.models # registers every table on Base

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

Base.metadata.create_all(bind=engine)

docs_url = "/docs" if settings.ENVIRONMENT != "production" else None

app = FastAPI(title="UPI Event Registration API", docs_url=docs_url, redoc_url=None)

def first_error_message(errors) -> str:
    if not errors:
        return "Invalid request"
    error = errors[0]
    loc = error.get("loc") or ()
    field = loc[-1] if loc else None
    if error.get("type") == "missing":
        return f"Missing required field: {field}"
    message = error.get("msg", "Invalid request")
    if error.get("type") == "value_error":
        # pydantic prefixes messages raised from validators
        return message.removeprefix("Value error, ")
    return f"{field}: {message}" if field is not None else message

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    message = first_error_message(exc.errors())
    logger.info("Rejected %s %s: %s", request.method, request.url.path, message)
    return JSONResponse(status_code=400, content={"detail": message})

# Uploaded images are served straight from the storage directory
os.makedirs(settings.STORAGE_DIR, exist_ok=True)
app.mount(settings.STORAGE_URL_PREFIX, StaticFiles(directory=settings.STORAGE_DIR), name="storage")

app.include_router(auth_endpoints.router, prefix="/auth", tags=["Authentication"])
app.include_router(user_endpoints.router, prefix="/api", tags=["Users"])
app.include_router(event_endpoints.router, prefix="/api", tags=["Events"])
app.include_router(payment_endpoints.router, prefix="/api", tags=["Payments"])
app.include_router(upload_endpoints.router, prefix="/api", tags=["Uploads"])
app.include_router(demo_endpoints.router, prefix="/api", tags=["Demo data"])


@app.get("/")
async def read_root():
    return {"message": "UPI Event Registration API", "docs": docs_url}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
