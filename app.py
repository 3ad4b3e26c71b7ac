from fastapi import Depends, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse, StreamingResponse
from fastapi.middleware.cors import CORSMiddleware
import time
import threading
import json
import queue
import asyncio

from config import config
from exceptions import RecognitionUnavailableError, UnsupportedFormatError
from logging_config import configure_logging
from pipeline import ExtractionResult, run_extraction
from storage import TimetableStore
from utils.common import generate_request_id
from utils.file_validator import validate_upload
from utils.validation import validate_timetable


logger = configure_logging(config.LOG_LEVEL)

EMPTY_RESULT_MESSAGE = (
    "Could not extract prayer times automatically. Please review the extracted "
    "text below and try a clearer image or CSV format."
)
DEFAULT_MOSQUE_NAME = "My Mosque"


app = FastAPI(
    title=config.PROJECT_NAME,
    version=config.VERSION,
    description=config.DESCRIPTION,
)

# CORS: Allow all origins (no authentication required)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_store() -> TimetableStore:
    return TimetableStore()


def _error_status(e: Exception) -> int:
    if isinstance(e, UnsupportedFormatError):
        return 415
    if isinstance(e, RecognitionUnavailableError):
        return 503
    return 500


def _result_payload(result: ExtractionResult, store: TimetableStore, mosque_name: str) -> dict:
    """Build the response body; persists the timetable when anything was found."""
    if result.is_empty:
        return {
            "success": False,
            "error": EMPTY_RESULT_MESSAGE,
            "method": result.method,
            "warnings": result.warnings,
            "debug": {"transcript": result.transcript or ""},
        }

    record = store.save_timetable(mosque_name or DEFAULT_MOSQUE_NAME, result.days)
    return {
        "success": True,
        "message": f"Successfully extracted {len(result.days)} days of prayer times!",
        "method": result.method,
        "warnings": result.warnings,
        "timetable": record,
        "validation": validate_timetable(result.days),
    }


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/timetable")
def get_timetable(store: TimetableStore = Depends(get_store)):
    record = store.get_timetable()
    if record is None:
        raise HTTPException(status_code=404, detail={"success": False, "error": "No timetable uploaded yet."})
    return {"success": True, "timetable": record}


@app.post("/extract")
async def extract_timetable(
    file: UploadFile = File(...),
    mosque_name: str = Form(DEFAULT_MOSQUE_NAME),
    store: TimetableStore = Depends(get_store),
):
    request_id = generate_request_id()
    start_time = time.time()
    filename = file.filename or "upload"

    logger.info(f"[REQ {request_id}] Incoming request: {filename} ({file.content_type})")

    # Step 1: Validate File
    data = await file.read()
    try:
        validate_upload(filename, file.content_type, data)
    except HTTPException as e:
        logger.error(f"[REQ {request_id}] File validation failed: {e.detail}")
        raise

    # Step 2: Run the pipeline off the event loop
    try:
        result = await asyncio.to_thread(run_extraction, data, filename, file.content_type)
    except (UnsupportedFormatError, RecognitionUnavailableError) as e:
        logger.error(f"[REQ {request_id}] Extraction failed: {e}")
        return JSONResponse(
            status_code=_error_status(e),
            content={"success": False, "error": str(e), "warnings": e.warnings, "request_id": request_id},
        )
    except Exception as e:
        logger.exception(f"[REQ {request_id}] Fatal error: {e}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Failed to process file", "debug": str(e), "request_id": request_id},
        )

    # saving writes to disk; keep it off the event loop
    response = await asyncio.to_thread(_result_payload, result, store, mosque_name)
    latency = round((time.time() - start_time) * 1000, 2)
    response["request_id"] = request_id
    response["latency_ms"] = latency
    logger.info(f"[REQ {request_id}] Completed in {latency}ms success={response['success']}")
    return response


@app.post("/extract/stream")
async def extract_timetable_stream(
    file: UploadFile = File(...),
    mosque_name: str = Form(DEFAULT_MOSQUE_NAME),
    store: TimetableStore = Depends(get_store),
):
    """
    Stream extraction progress as NDJSON: one `progress` line per stage update,
    then a final `complete` or `error` line.
    """
    request_id = generate_request_id()
    filename = file.filename or "upload"
    content_type = file.content_type
    data = await file.read()
    validate_upload(filename, content_type, data)

    logger.info(f"[REQ {request_id}] Incoming stream request: {filename}")

    def stream_generator():
        start_time = time.time()
        events = queue.Queue()

        def _worker():
            try:
                result = run_extraction(
                    data,
                    filename,
                    content_type,
                    on_progress=lambda p: events.put(("progress", p)),
                )
                events.put(("complete", result))
            except Exception as e:
                logger.exception(f"[REQ {request_id}] Stream worker error: {e}")
                events.put(("error", e))

        worker = threading.Thread(target=_worker, daemon=True)
        worker.start()

        while True:
            kind, payload = events.get()
            latency = round((time.time() - start_time) * 1000, 2)
            if kind == "progress":
                yield json.dumps({
                    "status": "progress",
                    "stage": payload.status,
                    "progress": payload.percent,
                    "latency_ms": latency,
                }).encode() + b"\n"
                continue

            if kind == "complete":
                body = _result_payload(payload, store, mosque_name)
                body.update({"status": "complete", "request_id": request_id, "latency_ms": latency})
            else:
                body = {
                    "status": "error",
                    "success": False,
                    "error": str(payload),
                    "error_code": _error_status(payload),
                    "warnings": getattr(payload, "warnings", []),
                    "request_id": request_id,
                    "latency_ms": latency,
                }
            yield json.dumps(body).encode() + b"\n"
            break

        worker.join()

    return StreamingResponse(stream_generator(), media_type="application/x-ndjson")
