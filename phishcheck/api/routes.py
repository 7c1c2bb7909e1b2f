import logging
from typing import List, Optional

from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from starlette.concurrency import run_in_threadpool

from phishcheck.config import settings
from phishcheck.exceptions import ExtractionError, FileTooLarge, NoInputError, UnsupportedFormat
from phishcheck.schemas import AnalysisResult, DocumentAnalysis, TextSubmission
from phishcheck.services.analysis_service import AnalysisService

logger = logging.getLogger(__name__)

router = APIRouter()

service = AnalysisService()

# Status codes when every submitted source failed the same way
FAILURE_STATUS = {
    FileTooLarge: 413,
    UnsupportedFormat: 415,
    ExtractionError: 422,
}

# ============================================================================
# ANALYSIS ENDPOINTS
# ============================================================================

@router.post("/analyze/text", response_model=AnalysisResult)
def analyze_text(submission: TextSubmission):
    """Analyze pasted text"""
    return service.analyze_text(submission.text)


@router.post("/analyze", response_model=DocumentAnalysis)
async def analyze_documents(
    files: Optional[List[UploadFile]] = File(None),
    text: Optional[str] = Form(None)
):
    """Analyze uploaded files (PDF, image, .eml, .txt) plus optional pasted text"""
    uploads = []
    for upload in files or []:
        content = await upload.read()
        uploads.append((upload.filename or "upload", content, upload.content_type))

    try:
        return await run_in_threadpool(service.analyze_documents, uploads, text)
    except NoInputError as e:
        raise HTTPException(status_code=_no_input_status(e), detail=str(e))
    except Exception as e:
        logger.error(f"❌ Error in /analyze: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Analysis failed: {str(e)}")


def _no_input_status(error: NoInputError) -> int:
    kinds = {type(failure) for failure in error.failures}
    if len(kinds) == 1:
        return FAILURE_STATUS.get(kinds.pop(), 400)
    return 400


@router.get("/health")
def health_check():
    return {"status": "healthy", "version": settings.VERSION}
