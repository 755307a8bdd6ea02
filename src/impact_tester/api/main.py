"""
FastAPI backend for Impact Tester.
Runs analyses, extracts document text and exports results as CSV.
"""
from fastapi import FastAPI, HTTPException, UploadFile, File
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Any
import io
import logging
import os
from datetime import datetime
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from impact_tester import __version__
from impact_tester.clients.llm_client import LLMClient
from impact_tester.core.models import AnalysisRequest, AnalysisResult
from impact_tester.core.schemas import ScenarioModel
from impact_tester.orchestrators.analysis_orchestrator import AnalysisOrchestrator, RunInProgressError
from impact_tester.utils.documents import DocumentExtractionError, extract_document_text, SUPPORTED_EXTENSIONS
from impact_tester.utils.exporter import export_filename, export_result

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MB

DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://localhost:5173"

app = FastAPI(
    title="Impact Tester API",
    description="Test scenarios and impact analysis for Jira stories, generated with Gemini",
    version=__version__
)

# CORS middleware for the web frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS).split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# One orchestrator per UI session; this service backs a single session
llm_client = LLMClient()
orchestrator = AnalysisOrchestrator(llm_client)


# ============================================================================
# Request/Response Models
# ============================================================================

class AnalysisRunRequest(BaseModel):
    reference_link: str = ""
    description: str = ""

class ExportRequest(BaseModel):
    primary_scenarios: List[ScenarioModel] = Field(default_factory=list)
    regression_scenarios: Optional[List[ScenarioModel]] = None
    impact_notes: str = ""
    regression_suggestions: str = ""
    ticket_id: str = ""

class AnalysisRunResponse(BaseModel):
    state: str
    result: Dict[str, Any]
    error: Optional[Dict[str, Any]] = None
    generated_at: str


# ============================================================================
# Analysis
# ============================================================================

@app.post("/api/analysis", response_model=AnalysisRunResponse)
def run_analysis(request: AnalysisRunRequest):
    """Run both generation stages; a failed run still returns any stage 1 data."""
    try:
        result, failure = orchestrator.run(
            AnalysisRequest(reference_link=request.reference_link, description=request.description)
        )
    except RunInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return AnalysisRunResponse(
        state=orchestrator.state.value,
        result=result.to_dict(),
        error=failure.to_dict() if failure else None,
        generated_at=datetime.now().isoformat(),
    )


# ============================================================================
# Documents
# ============================================================================

@app.post("/api/documents/extract")
async def extract_document(file: UploadFile = File(...)):
    """Extract the description text from an uploaded PDF, Word or text file."""
    content = await file.read()
    if len(content) > MAX_FILE_SIZE:
        raise HTTPException(
            status_code=413,
            detail=f"File '{file.filename}' exceeds maximum size of {MAX_FILE_SIZE // (1024*1024)}MB"
        )

    try:
        text = extract_document_text(file.filename or "", content)
    except DocumentExtractionError as e:
        logger.warning("Document extraction failed for %s: %s", file.filename, e)
        raise HTTPException(status_code=400, detail=str(e))

    return {"filename": file.filename, "text": text, "supported": sorted(SUPPORTED_EXTENSIONS)}


# ============================================================================
# Export
# ============================================================================

@app.post("/api/analysis/export")
async def export_analysis(request: ExportRequest):
    """Download the analysis as CSV."""
    result = AnalysisResult.from_dict({
        "primary_scenarios": [s.model_dump() for s in request.primary_scenarios],
        "regression_scenarios": (
            None if request.regression_scenarios is None
            else [s.model_dump() for s in request.regression_scenarios]
        ),
        "impact_notes": request.impact_notes,
        "regression_suggestions": request.regression_suggestions,
    })
    if not result.has_content():
        raise HTTPException(status_code=400, detail="No hay resultados para exportar.")

    document = export_result(result)
    filename = export_filename(request.ticket_id)
    logger.info("Exporting analysis to %s (%d bytes)", filename, len(document))

    return StreamingResponse(
        io.BytesIO(document.encode("utf-8")),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


# ============================================================================
# Health Check
# ============================================================================

@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "name": "Impact Tester API",
        "version": __version__,
        "status": "running"
    }


@app.get("/api/health")
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "llm": llm_client.status_label(),
        "analysis_state": orchestrator.state.value,
        "timestamp": datetime.now().isoformat()
    }


if __name__ == "__main__":
    import uvicorn
    # Set API_HOST=0.0.0.0 to listen on all interfaces
    host = os.getenv("API_HOST", "127.0.0.1")
    uvicorn.run(app, host=host, port=8000)
