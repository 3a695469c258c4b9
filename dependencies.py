import logging
from functools import lru_cache
from typing import Optional

from groq import Groq

import config

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_ai_client() -> Optional[Groq]:
    """Groq client shared by the process, or None when no API key is configured."""
    if not config.GROQ_API_KEY:
        logger.warning("GROQ_API_KEY is not set; /api/ai-chat will be unavailable")
        return None
    return Groq(
        api_key=config.GROQ_API_KEY,
        timeout=config.AI_TIMEOUT_SECONDS,
        max_retries=0,
    )
