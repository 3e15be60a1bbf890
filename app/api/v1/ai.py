from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_session_context
from app.core.logger import logger
from app.schemas.ai import ChatRequest, ChatResponse, SymptomAnalysisRequest, TriageResult
from app.schemas.auth import SessionContext
from app.services.ai_service import AIService, AIServiceError

router = APIRouter()

def get_ai_service() -> AIService:
    return AIService()

@router.post("/analyze-symptoms", response_model=TriageResult)
async def analyze_symptoms(
    request: SymptomAnalysisRequest,
    ctx: SessionContext = Depends(get_session_context),
    service: AIService = Depends(get_ai_service)
):
    try:
        return await service.analyze_symptoms(request)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AIServiceError as e:
        logger.error(f"Symptom analysis failed for user {ctx.user_id}: {e}")
        raise HTTPException(status_code=502, detail="Analysis failed")

@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    ctx: SessionContext = Depends(get_session_context),
    service: AIService = Depends(get_ai_service)
):
    try:
        reply = await service.chat(request.history, request.message)
    except AIServiceError as e:
        logger.error(f"Chat failed for user {ctx.user_id}: {e}")
        raise HTTPException(status_code=502, detail="Analysis failed")
    return ChatResponse(reply=reply)
