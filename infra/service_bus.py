"""
FastAPI Service Bus
-------------------
Internal API in front of the orchestrator.

Endpoints:
- GET  /health    liveness
- GET  /status    orchestrator counters
- POST /detect    run the command gate only
- POST /chat      gate, then action or dialogue
- GET  /commands  registered intents and triggers

This is NOT an external-facing API - it's for internal service communication.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Dict, List, Optional
import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field, model_serializer
from pydantic.alias_generators import to_camel

API_VERSION = "0.1.0"


# Request/Response Models

class CamelModel(BaseModel):
    """Serialises with camelCase keys, accepts either case on input."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DetectRequest(CamelModel):
    """Message to classify."""
    message: Optional[str] = Field(None, description="Raw chat message")


class DetectionResponse(CamelModel):
    """Command gate verdict."""
    is_command: bool
    command_type: str
    original_message: str
    normalized_command: Optional[str] = None
    action: Optional[str] = None

    @model_serializer(mode="wrap")
    def _omit_unset(self, handler):
        # normalizedCommand and action only appear on a match
        return {key: value for key, value in handler(self).items() if value is not None}


class ChatRequest(CamelModel):
    """Chat message input."""
    message: str = Field(..., description="User message")
    session_id: Optional[str] = Field(None, description="Conversation session")
    user_id: Optional[str] = Field(None, description="Sender")


class ChatResponse(CamelModel):
    """Routing outcome for one chat message."""
    success: bool
    route: str
    action: Optional[str] = None
    reply: Optional[str] = None
    error: Optional[str] = None
    turn_id: str
    execution_time_ms: float = 0.0
    detection: DetectionResponse


class IntentInfo(CamelModel):
    """Registered intent."""
    type: str
    action: str
    description: str
    commands: List[str]
    phrases: List[str]


class StatusResponse(CamelModel):
    """System status response."""
    initialized: bool
    intents_loaded: int
    triggers_loaded: int
    dialogue: Optional[str] = None
    messages_processed: int
    commands_detected: int
    errors: Dict[str, int] = Field(default_factory=dict)
    uptime_seconds: float


class HealthResponse(CamelModel):
    """Health check response."""
    status: str
    version: str = API_VERSION
    timestamp: str = Field(default_factory=lambda: datetime.now().isoformat())


def _detection_response(detection, action: Optional[str]) -> DetectionResponse:
    return DetectionResponse(
        is_command=detection.is_command,
        command_type=detection.command_type.value,
        original_message=detection.original_message,
        normalized_command=detection.normalized_command,
        action=action,
    )


# Service Bus

class ServiceBus:
    """
    Internal service bus for the AIDA orchestrator.

    Provides REST API for:
    - Command detection
    - Chat routing
    - Status queries
    """

    def __init__(self, orchestrator=None):
        self._orchestrator = orchestrator
        self._logger = logging.getLogger("aida.infra.service_bus")
        self._app: Optional[FastAPI] = None

    def _require_orchestrator(self):
        if not self._orchestrator:
            raise HTTPException(status_code=503, detail="Orchestrator not initialized")
        return self._orchestrator

    def create_app(self) -> FastAPI:
        """Create and configure the FastAPI application."""

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            self._logger.info("Service bus starting...")
            yield
            self._logger.info("Service bus shutting down...")

        app = FastAPI(
            title="AIDA Orchestrator Internal API",
            description="Command gate and chat routing for the AIDA orchestrator",
            version=API_VERSION,
            lifespan=lifespan
        )

        # CORS for local development
        app.add_middleware(
            CORSMiddleware,
            allow_origin_regex=r"http://(localhost|127\.0\.0\.1)(:\d+)?",
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        self._register_routes(app)

        self._app = app
        return app

    def _register_routes(self, app: FastAPI) -> None:
        """Register all API routes."""

        @app.get("/health", response_model=HealthResponse, tags=["System"])
        async def health_check():
            """Health check endpoint."""
            return HealthResponse(status="healthy")

        @app.get("/status", response_model=StatusResponse, tags=["System"])
        async def get_status():
            """Get orchestrator status."""
            orchestrator = self._require_orchestrator()
            return StatusResponse(**orchestrator.get_status())

        @app.post(
            "/detect",
            response_model=DetectionResponse,
            response_model_exclude_none=True,
            tags=["Commands"],
        )
        async def detect_command(request: DetectRequest):
            """Run the command gate on a message without routing it."""
            preprocessor = self._require_orchestrator().preprocessor
            detection = preprocessor.detect(request.message)
            return _detection_response(detection, preprocessor.resolve_action(detection))

        @app.get("/commands", response_model=List[IntentInfo], tags=["Commands"])
        async def list_commands():
            """List registered intents and their triggers."""
            registry = self._require_orchestrator().preprocessor.registry
            return [
                IntentInfo(
                    type=intent.command_type.value,
                    action=intent.action,
                    description=intent.description,
                    commands=sorted(intent.commands),
                    phrases=sorted(intent.phrases),
                )
                for intent in registry.list_intents()
            ]

        @app.post("/chat", response_model=ChatResponse, tags=["Chat"])
        async def chat(request: ChatRequest):
            """Route a chat message: command action or dialogue reply."""
            orchestrator = self._require_orchestrator()

            self._logger.info(
                f"Chat message received ({len(request.message)} chars)",
                extra={"session_id": request.session_id},
            )

            result = orchestrator.process_message(
                request.message,
                session_id=request.session_id,
                user_id=request.user_id,
            )

            return ChatResponse(
                success=result.success,
                route=result.route,
                action=result.action,
                reply=result.reply,
                error=result.error,
                turn_id=result.turn_id,
                execution_time_ms=result.execution_time_ms,
                detection=_detection_response(result.detection, result.action),
            )


def create_app(orchestrator=None) -> FastAPI:
    """Create the FastAPI application."""
    bus = ServiceBus(orchestrator)
    return bus.create_app()

