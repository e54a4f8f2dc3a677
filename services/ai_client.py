# services/ai_client.py
import logging
from typing import Optional

from openai import OpenAI

from core.config import LLM_API_KEY, LLM_BASE_URL, LLM_TIMEOUT

logger = logging.getLogger(__name__)

def get_ai_client(api_key: Optional[str] = None, base_url: Optional[str] = None) -> Optional[OpenAI]:
    """OpenAI-compatible client for the LLM gateway, or None when no key is configured."""
    api_key = api_key or LLM_API_KEY
    if not api_key:
        logger.warning("LLM_API_KEY not configured; AI features disabled")
        return None
    return OpenAI(api_key=api_key, base_url=base_url or LLM_BASE_URL, timeout=LLM_TIMEOUT)
