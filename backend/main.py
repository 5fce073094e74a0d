import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api import auth
from api import blocks
from api import chat
from api import document
from api import files
from api import history
from api import vote
from core.config import settings
from core.database import create_tables
from utils.logger import init_logging, get_logger, set_request_id, clear_request_id
from utils.queries import RecordNotFound

# Initialize logging
init_logging()
logger = get_logger("backend.main")

app = FastAPI(
    title=settings.app_name
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request ID middleware for request tracing
@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]
    set_request_id(request_id)
    logger.info("Request started", extra={
        "method": request.method,
        "path": request.url.path,
    })
    try:
        response = await call_next(request)
        logger.info("Request completed", extra={"status_code": response.status_code})
        response.headers["X-Request-ID"] = request_id
        return response
    except Exception as e:
        logger.error("Request failed", extra={"error": str(e)}, exc_info=True)
        raise
    finally:
        clear_request_id()


@app.exception_handler(RecordNotFound)
async def record_not_found_handler(request: Request, exc: RecordNotFound):
    return JSONResponse(status_code=404, content={"detail": str(exc) or "Not Found"})

# Routes
app.include_router(auth.router)
app.include_router(chat.router)
app.include_router(history.router)
app.include_router(vote.router)
app.include_router(document.router)
app.include_router(blocks.router)
app.include_router(files.router)

@app.on_event("startup")
async def startup_event():
    await create_tables()
    logger.info("Database tables created")
    logger.info("Backend server started")

@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Backend server shutting down")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
