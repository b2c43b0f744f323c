"""HTTP conversion API using FastAPI."""
from typing import Any, Dict, List, Optional
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool
import logging
import threading
import time

from promtable.builder import MetricRowBuilder
from promtable.config import APIConfig
from promtable.errors import InvalidInputType, ParseFailure
from promtable.output import jsonable
from promtable.self_metrics import SelfMetrics

logger = logging.getLogger(__name__)


class ConvertRequest(BaseModel):
    """Request to convert exposition text; non-string values are rejected by the builder."""
    text: Any = None


class LogLevelRequest(BaseModel):
    """Request to change log level."""
    level: str


class ConversionAPI:
    """FastAPI-based API serving exposition-to-rows conversion."""

    def __init__(
        self,
        builder: Optional[MetricRowBuilder] = None,
        config: Optional[APIConfig] = None,
        self_metrics: Optional[SelfMetrics] = None
    ):
        """
        Initialize conversion API.

        Args:
            builder: Row builder used for every request
            config: API settings (body size limit)
            self_metrics: Metrics registry exposed on /metrics
        """
        self.builder = builder or MetricRowBuilder()
        self.config = config or APIConfig()
        self.self_metrics = self_metrics or SelfMetrics()
        self.app = FastAPI(title="promtable Conversion API")
        self.start_time = time.time()

        self.conversion_count = 0
        self._count_lock = threading.Lock()

        self._setup_routes()

    def convert(self, text: Any) -> List[Dict[str, Any]]:
        """Run one conversion, recording self metrics and mapping errors to HTTP codes."""
        input_size = len(text.encode("utf-8")) if isinstance(text, str) else 0
        if input_size > self.config.max_body_bytes:
            raise HTTPException(status_code=413, detail="Input exceeds max_body_bytes")

        start = time.time()
        try:
            records = self.builder.convert(text)
        except InvalidInputType as e:
            logger.warning(f"Rejected input of type {e.received.__name__}")
            self.self_metrics.record_failure("invalid_input")
            raise HTTPException(status_code=400, detail=str(e))
        except ParseFailure as e:
            logger.warning(f"Parse failure: {e.message}")
            self.self_metrics.record_failure("parse_failure")
            raise HTTPException(status_code=422, detail=e.message)

        duration = time.time() - start
        self.self_metrics.record_success(records, input_size, duration)

        with self._count_lock:
            self.conversion_count += 1

        logger.info(f"Converted {len(text)} chars into {len(records)} rows in {duration:.4f}s")
        return records

    def _rows_response(self, records: List[Dict[str, Any]]) -> JSONResponse:
        return JSONResponse(content={"rows": jsonable(records), "count": len(records)})

    def _setup_routes(self):
        """Setup API routes."""

        @self.app.get("/healthz")
        async def healthz():
            """Health check endpoint."""
            return {"status": "healthy", "timestamp": time.time()}

        @self.app.get("/status")
        async def status():
            """Get current service status."""
            with self._count_lock:
                conversions = self.conversion_count

            return {
                "uptime_seconds": time.time() - self.start_time,
                "conversions": conversions,
                "config": {
                    "label_order": self.builder.config.label_order,
                    "max_body_bytes": self.config.max_body_bytes,
                }
            }

        @self.app.post("/convert")
        def convert_json(request: ConvertRequest):
            """Convert exposition text sent as a JSON field."""
            try:
                return self._rows_response(self.convert(request.text))
            except HTTPException:
                raise
            except Exception as e:
                logger.error(f"Error converting input: {e}", exc_info=True)
                raise HTTPException(status_code=500, detail=str(e))

        @self.app.post("/convert/text")
        async def convert_text(request: Request):
            """Convert exposition text sent as a plain text body."""
            body = await request.body()
            if len(body) > self.config.max_body_bytes:
                raise HTTPException(status_code=413, detail="Input exceeds max_body_bytes")

            try:
                text = body.decode("utf-8")
            except UnicodeDecodeError:
                self.self_metrics.record_failure("invalid_input")
                raise HTTPException(status_code=400, detail="Request body is not valid UTF-8")

            try:
                records = await run_in_threadpool(self.convert, text)
                return self._rows_response(records)
            except HTTPException:
                raise
            except Exception as e:
                logger.error(f"Error converting input: {e}", exc_info=True)
                raise HTTPException(status_code=500, detail=str(e))

        @self.app.get("/metrics")
        async def metrics():
            """Self metrics in the Prometheus text format."""
            return Response(content=self.self_metrics.exposition(), media_type=CONTENT_TYPE_LATEST)

        @self.app.post("/control/loglevel")
        async def set_log_level(request: LogLevelRequest):
            """Change log level at runtime."""
            level = request.level.upper()

            if level not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
                raise HTTPException(
                    status_code=400,
                    detail=f"Invalid log level: {level}"
                )

            logging.getLogger().setLevel(getattr(logging, level))
            logger.info(f"Log level changed to: {level}")

            return {
                "status": "log_level_changed",
                "level": level,
                "timestamp": time.time()
            }

    def run(self, host: str = "0.0.0.0", port: int = 8082):
        """Run the API server."""
        import uvicorn
        uvicorn.run(self.app, host=host, port=port, log_level="info")
