# aidoctor/gemini.py
import logging
from typing import Any, Dict, List, Optional, Sequence

from fastapi import HTTPException
from google import genai

from . import config
from .config_store import resolve_api_key

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """You are a medical AI assistant. Analyze the following symptoms and provide a comprehensive response with:
1. A brief description of what might be happening (possible condition/diagnosis)
2. Recommended medicines with approximate costs in the following format:
   MEDICINES:
   - Medicine Name 1 (Generic Name): Brief description. Approximate Cost: $XX.XX
   - Medicine Name 2 (Generic Name): Brief description. Approximate Cost: $XX.XX
   (Include 2-4 commonly recommended medicines with approximate costs in USD)
3. Important notes and warnings
4. When to consult a real doctor

Format your response in a clear, professional manner. Always emphasize that this is preliminary advice and consulting a healthcare professional is recommended for proper diagnosis and treatment. Include approximate costs for medicines in USD.

Symptoms: {symptoms}

Please provide a detailed, helpful medical response."""

CHECK_PROMPT = 'Say "test"'
KEY_MISSING = "GenAI API key not configured"


class AnalysisError(Exception):
    INVALID_API_KEY = "invalid_api_key"
    QUOTA_EXCEEDED = "quota_exceeded"
    MODEL_UNAVAILABLE = "model_unavailable"
    UNKNOWN = "unknown"

    MESSAGES = {
        INVALID_API_KEY: "Invalid API key. Please check your Gemini API key configuration.",
        QUOTA_EXCEEDED: "API quota exceeded. Please check your Gemini API usage limits.",
        MODEL_UNAVAILABLE: (
            "Gemini model not available. Please verify your API key has access to "
            "Gemini models. Visit /test-gemini to check available models."
        ),
        UNKNOWN: "Failed to analyze symptoms.",
    }

    def __init__(self, category: str, detail: str = ""):
        super().__init__(detail or self.MESSAGES[category])
        self.category = category
        self.detail = detail

    @property
    def user_message(self) -> str:
        return self.MESSAGES[self.category]


def classify_error(message: str) -> str:
    text = message or ""
    if "API key" in text or "API_KEY_INVALID" in text:
        return AnalysisError.INVALID_API_KEY
    if "quota" in text.lower() or "RESOURCE_EXHAUSTED" in text:
        return AnalysisError.QUOTA_EXCEEDED
    if "not found" in text.lower() or "404" in text:
        return AnalysisError.MODEL_UNAVAILABLE
    return AnalysisError.UNKNOWN


def build_prompt(symptoms: str) -> str:
    return PROMPT_TEMPLATE.format(symptoms=symptoms)


class SymptomAnalyzer:
    """Sends symptom text to Gemini, walking the model list until one answers."""

    def __init__(self, client: Any, model_names: Optional[Sequence[str]] = None):
        self.client = client
        self.model_names = list(model_names or config.GEMINI_MODELS)

    def _require_client(self) -> None:
        if self.client is None:
            raise AnalysisError(AnalysisError.INVALID_API_KEY, KEY_MISSING)

    def analyze(self, symptoms: str) -> str:
        self._require_client()
        prompt = build_prompt(symptoms)
        last_error = ""
        for model_name in self.model_names:
            try:
                response = self.client.models.generate_content(
                    model=model_name,
                    contents=prompt,
                )
            except Exception as exc:
                logger.warning("Model %s failed: %s", model_name, exc)
                last_error = str(exc)
                continue
            text = response.text
            if not text:
                logger.warning("Model %s returned an empty response", model_name)
                last_error = f"Model {model_name} returned an empty response"
                continue
            logger.info("Successfully used model: %s", model_name)
            return text

        raise AnalysisError(
            classify_error(last_error),
            f"All Gemini models failed. Last error: {last_error}",
        )

    def check_models(self, model_names: Optional[Sequence[str]] = None) -> List[Dict[str, Any]]:
        results = []
        for model_name in model_names or config.GEMINI_CHECK_MODELS:
            if self.client is None:
                results.append({"model": model_name, "status": "failed", "error": KEY_MISSING})
                continue
            try:
                response = self.client.models.generate_content(
                    model=model_name,
                    contents=CHECK_PROMPT,
                )
                results.append({
                    "model": model_name,
                    "status": "success",
                    "response": (response.text or "")[:50],
                })
            except Exception as exc:
                results.append({"model": model_name, "status": "failed", "error": str(exc)})
        return results


def get_analyzer() -> SymptomAnalyzer:
    """Without a key the analyzer still builds; calls on it fail as invalid_api_key."""
    api_key = resolve_api_key()
    return SymptomAnalyzer(genai.Client(api_key=api_key) if api_key else None)


def analysis_http_error(exc: AnalysisError) -> HTTPException:
    detail: Dict[str, Any] = {"error": exc.user_message, "category": exc.category}
    if config.is_development():
        detail["details"] = str(exc)
    return HTTPException(status_code=500, detail=detail)
