"""
Timetable Import Service - Main Application
Turns a photo or screenshot of a class timetable into schedule entries
and stores them against a timetable.
"""

import os
from datetime import datetime, timezone
from typing import List

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv
from pydantic import BaseModel, Field
import structlog

from ocr.models import WEEKDAYS, ExtractedEntry
from pipeline.config import PipelineConfig
from pipeline.errors import InvalidImageError
from pipeline.orchestrator import TimetableExtractionOrchestrator
from storage.schedule_store import ScheduleStore

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------
load_dotenv()

config = PipelineConfig.from_env()

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)
logger = structlog.get_logger()

# ---------------------------------------------------------------------------
# App Init
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Timetable Import Service",
    description="Upload a timetable image → get structured schedule entries",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Singletons
orchestrator = TimetableExtractionOrchestrator.from_config(config)
store = ScheduleStore()


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class OCRRequest(BaseModel):
    imageData: str = Field(min_length=1)
    enhanceResults: bool = True


class EntryIn(BaseModel):
    day: str
    startTime: str = Field(pattern=r'^[0-2]?[0-9]:[0-5][0-9]$')
    endTime: str = Field(pattern=r'^[0-2]?[0-9]:[0-5][0-9]$')
    title: str = Field(min_length=1)
    location: str = ""

    def to_entry(self) -> ExtractedEntry:
        return ExtractedEntry(
            day=self.day,
            start_time=self.startTime,
            end_time=self.endTime,
            title=self.title,
            location=self.location,
        )


class BulkEntriesRequest(BaseModel):
    entries: List[EntryIn]


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    message = "Invalid image data" if request.url.path == "/api/ocr" else "Invalid entry data"
    return JSONResponse(
        status_code=400,
        content={"message": message, "errors": jsonable_encoder(exc.errors())},
    )


# ---------------------------------------------------------------------------
# Routes - API
# ---------------------------------------------------------------------------

@app.post("/api/ocr")
def extract_timetable(body: OCRRequest):
    """
    Run the extraction chain on an uploaded image:
    1. Gemini vision
    2. Tesseract + line heuristics
    3. Static fallback timetable
    Always answers with a non-empty entry list unless the image is invalid.
    """
    try:
        result = orchestrator.extract_with_source(
            body.imageData, enhance=body.enhanceResults
        )
    except InvalidImageError as e:
        logger.info("ocr_rejected", error=str(e))
        raise HTTPException(400, str(e))

    logger.info("ocr_done", source=result.source, entries=len(result.entries))
    return JSONResponse(result.to_dict())


@app.post("/api/timetables/{timetable_id}/entries/bulk", status_code=201)
def bulk_create_entries(timetable_id: int, body: BulkEntriesRequest):
    """Store reviewed entries against a timetable, one row per entry."""
    for entry in body.entries:
        if entry.day not in WEEKDAYS:
            raise HTTPException(400, f"Unknown day: {entry.day}")
    return store.create_entries(timetable_id, [e.to_entry() for e in body.entries])


@app.get("/api/timetables/{timetable_id}/entries")
def list_entries(timetable_id: int):
    return store.get_entries(timetable_id)


@app.get("/api/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


# ---------------------------------------------------------------------------
# Startup
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app:app",
        host=os.getenv("APP_HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", os.getenv("APP_PORT", "8000"))),
        reload=os.getenv("DEBUG", "false").lower() == "true",
    )
