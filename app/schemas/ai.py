from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal

Severity = Literal["Mild", "Moderate", "Severe"]

class SymptomAnalysisRequest(BaseModel):
    category: str = Field(min_length=1)
    symptoms: List[str] = []
    description: str = ""
    severity: Severity = "Moderate"
    language: str = "English"

class TriageResult(BaseModel):
    """Shape the model must return; anything else is rejected."""
    model_config = ConfigDict(extra="ignore")

    possibilities: str = Field(min_length=1)
    severity: Literal["High", "Medium", "Low"]
    specialist: str = Field(min_length=1)
    diet: List[str] = []
    exercise: List[str] = []

class ChatTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str

class ChatRequest(BaseModel):
    message: str = Field(min_length=1, max_length=4000)
    history: List[ChatTurn] = []

class ChatResponse(BaseModel):
    reply: str
