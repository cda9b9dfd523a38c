# contract_analyzer/main.py
from fastapi import FastAPI, Request, Depends
from fastapi.responses import JSONResponse
import time, logging, sys, traceback
from typing import Optional
from fastapi.middleware.cors import CORSMiddleware

from contract_analyzer.config import CORS_ALLOW_ORIGIN, LOG_LEVEL

# quiet client libraries
for name in ("httpx", "httpcore", "openai"):
    logging.getLogger(name).setLevel(logging.WARNING)

# ===== logging setup =====
logging.basicConfig(
    level=LOG_LEVEL,
    stream=sys.stdout,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
log = logging.getLogger("contract_analyzer")

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request as StarletteRequest
from starlette.responses import Response as StarletteResponse

class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: StarletteRequest, call_next):
        t0 = time.time()
        clen = request.headers.get("content-length", "-")
        try:
            log.info(f"[req] {request.method} {request.url.path} len={clen}")
            resp: StarletteResponse = await call_next(request)
            dt = int((time.time() - t0) * 1000)
            log.info(f"[res] {request.method} {request.url.path} -> {resp.status_code} {dt}ms")
            return resp
        except Exception:
            dt = int((time.time() - t0) * 1000)
            log.error(f"[res] {request.method} {request.url.path} -> 500 {dt}ms\n{traceback.format_exc()}")
            raise

from contract_analyzer.errors import BadRequest
from contract_analyzer.models.api_models import AnalyzeResponse, ErrorResponse
from contract_analyzer.services.analyzer import analyze_contract
from contract_analyzer.services.extraction import ExtractionService, get_extraction_service

# results depend on the remote document; never let a proxy cache them
NO_STORE = {"Cache-Control": "no-store"}

def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
        headers=NO_STORE,
    )

def create_app(extraction_service: Optional[ExtractionService] = None) -> FastAPI:
    app = FastAPI(title="Contract Analyzer", version="0.1.0")
    app.state.extraction_service = extraction_service or ExtractionService()
    app.add_middleware(AccessLogMiddleware)

    origins = [o.strip() for o in CORS_ALLOW_ORIGIN.split(",") if o.strip()]
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["*"],
            expose_headers=["*"],
        )

    @app.get("/health", tags=["meta"])
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/", tags=["meta"])
    def root() -> dict:
        return {"message": "Contract Analyzer is running"}

    @app.post(
        "/api/analyze",
        tags=["analyze"],
        response_model=AnalyzeResponse,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    async def analyze(request: Request, service: ExtractionService = Depends(get_extraction_service)) -> JSONResponse:
        """
        Accepts { fileUrl } and returns { result: { issues, sections } }.
        Issues and sections are index-aligned and share ids.
        """
        try:
            body = await request.json()
            if body is None:
                raise TypeError("Request body is null")
            file_url = body.get("fileUrl") if isinstance(body, dict) else None
            if not file_url:
                raise BadRequest("File URL is required")

            log.info(f"[analyze] fileUrl={file_url!r}")
            t0 = time.time()
            result = await analyze_contract(file_url, service)
            dt = int((time.time() - t0) * 1000)
            log.info(f"[analyze] done issues={len(result.issues)} in {dt}ms")
            return JSONResponse(
                content=AnalyzeResponse(result=result).model_dump(exclude_none=True),
                headers=NO_STORE,
            )
        except BadRequest as e:
            log.warning(f"[analyze] bad request: {e}")
            return _error(e.status_code, str(e))
        except Exception as e:
            log.error(f"[analyze] failed: {type(e).__name__}: {e}\n{traceback.format_exc()}")
            return _error(500, str(e) or "An unknown error occurred")

    return app

app = create_app()
