# backend/main.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv
import logging

load_dotenv()

from config import settings
from database import init_db
from utils.logging_setup import setup_logging
from utils.errors import ServiceError
from services.notifications import register_notifiers

# Router imports
from routes.ai import router as ai_router
from routes.chat_sessions import router as chat_sessions_router
from routes.batches import router as batches_router
from routes.dashboard import router as dashboard_router
from routes.tasks import router as tasks_router

# Initialisation
setup_logging(settings)
init_db()
register_notifiers()

logger = logging.getLogger(__name__)

app = FastAPI(title="BrandOps API", version="1.0.0")

# CORS: the UI runs on APP_URL; local dev servers are always allowed
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
if settings.APP_URL and settings.APP_URL not in origins:
    origins.append(settings.APP_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Domain errors -> {"success": false, "error": ...}
@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.message})

# Router registration
app.include_router(ai_router)
app.include_router(chat_sessions_router)
app.include_router(batches_router)
app.include_router(dashboard_router)
app.include_router(tasks_router)

@app.get("/")
def read_root():
    return {"message": "BrandOps API is running"}
