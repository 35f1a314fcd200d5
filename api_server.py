"""
SmartCalc API Server - FastAPI backend for the editor front end.
Provides REST and WebSocket endpoints for live document evaluation.
"""

import json
import logging
from datetime import datetime
from typing import List

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ValidationError

from calc_engine import (
    CalcEngine, find_dependent_lines, has_result, strip_result,
)
from config import load_settings
from constants import APP_NAME, APP_VERSION, APP_DESCRIPTION, FUNCTION_NAMES
from reference_adjuster import adjust_references

logger = logging.getLogger(__name__)


# =============================================================================
# REQUEST/RESPONSE MODELS
# =============================================================================

class EvaluateRequest(BaseModel):
    text: str
    active_line: int = 0


class LineResult(BaseModel):
    line_num: int
    input: str
    output: str


class EvaluateResponse(BaseModel):
    results: List[LineResult]
    text: str


class AdjustReferencesRequest(BaseModel):
    old_text: str
    new_text: str


class TextResponse(BaseModel):
    text: str


class DependentsRequest(BaseModel):
    text: str
    changed_line: int
    transitive: bool = False


class DependentsResponse(BaseModel):
    lines: List[int]


class LineRequest(BaseModel):
    line: str


class LineResponse(BaseModel):
    line: str


class HasResultResponse(BaseModel):
    has_result: bool


class TextRequest(BaseModel):
    text: str


# =============================================================================
# FASTAPI APPLICATION SETUP
# =============================================================================

settings = load_settings()

app = FastAPI(
    title=f"{APP_NAME} API",
    description=APP_DESCRIPTION,
    version=APP_VERSION,
)

# The editor runs from a local origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

engine = CalcEngine(settings=settings)


class ConnectionManager:
    def __init__(self):
        self.active_connections: List[WebSocket] = []

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.append(websocket)

    def disconnect(self, websocket: WebSocket):
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)

    async def send_json(self, payload: dict, websocket: WebSocket):
        await websocket.send_text(json.dumps(payload))


manager = ConnectionManager()


def evaluate_payload(request: EvaluateRequest) -> EvaluateResponse:
    records = engine.evaluate_text(request.text, request.active_line)
    return EvaluateResponse(
        results=[LineResult(**record) for record in records],
        text="\n".join(record["output"] for record in records),
    )


# =============================================================================
# API ENDPOINTS
# =============================================================================

@app.get("/")
@app.head("/")
async def root():
    """Health check endpoint"""
    return {
        "message": f"{APP_NAME} API Server",
        "version": APP_VERSION,
        "status": "running",
        "timestamp": datetime.now().isoformat(),
    }


@app.post("/api/evaluate", response_model=EvaluateResponse)
async def evaluate_document(request: EvaluateRequest):
    """
    Evaluate a whole document and return the rendered text plus per-line output.
    """
    return evaluate_payload(request)


@app.post("/api/adjust-references", response_model=TextResponse)
async def adjust_document_references(request: AdjustReferencesRequest):
    """
    Renumber \\N references in new_text after a line insert or delete.
    """
    return TextResponse(text=adjust_references(request.old_text, request.new_text))


@app.post("/api/dependents", response_model=DependentsResponse)
async def dependent_lines(request: DependentsRequest):
    lines = find_dependent_lines(request.text.split("\n"), request.changed_line, request.transitive)
    return DependentsResponse(lines=lines)


@app.post("/api/strip-result", response_model=LineResponse)
async def strip_line_result(request: LineRequest):
    return LineResponse(line=strip_result(request.line))


@app.post("/api/has-result", response_model=HasResultResponse)
async def line_has_result(request: LineRequest):
    return HasResultResponse(has_result=has_result(request.line))


@app.post("/api/resolve-references", response_model=TextResponse)
async def resolve_references(request: TextRequest):
    """
    Replace every \\N with the value it points at, for copying text out.
    """
    return TextResponse(text=engine.replace_refs_with_values(request.text))


@app.get("/api/functions")
async def get_available_functions():
    """
    Get list of available functions for autocompletion.
    """
    return {"functions": sorted(FUNCTION_NAMES)}


# =============================================================================
# WEBSOCKET ENDPOINTS
# =============================================================================

@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """
    WebSocket endpoint for live evaluation while typing.
    """
    await manager.connect(websocket)
    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
                message_type = message.get("type")
                if message_type == "evaluate":
                    result = evaluate_payload(EvaluateRequest(**message))
                    response = {"type": "evaluation_result", **result.model_dump()}
                elif message_type == "adjust_references":
                    request = AdjustReferencesRequest(**message)
                    response = {
                        "type": "adjusted_references",
                        "text": adjust_references(request.old_text, request.new_text),
                    }
                else:
                    response = {"type": "error", "error": f"unknown message type: {message_type}"}
            except (json.JSONDecodeError, ValidationError, AttributeError) as e:
                logger.info("Rejected websocket message: %s", e)
                response = {"type": "error", "error": "invalid message"}

            await manager.send_json(response, websocket)

    except WebSocketDisconnect:
        manager.disconnect(websocket)


# =============================================================================
# SERVER STARTUP
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting %s API Server at http://%s:%d", APP_NAME, settings.host, settings.port)

    uvicorn.run(
        "api_server:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )
