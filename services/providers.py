"""Connectivity probes for remote chat model providers."""
import logging
from typing import Dict

from langchain.chat_models import init_chat_model

from config import Settings

logger = logging.getLogger(__name__)

PROBE_PROMPT = "Hello, OpenAI!"


class ProviderProbeError(Exception):
    """Raised when a provider probe fails."""


async def probe_openai(settings: Settings) -> Dict[str, str]:
    """
    Send a one-shot completion to the OpenAI probe model.

    Returns:
        Dict with the reply text and the model that answered

    Raises:
        ProviderProbeError: If the provider call fails
    """
    try:
        model = init_chat_model(
            settings.openai_probe_model,
            model_provider="openai",
            api_key=settings.openai_api_key,
        )
        response = await model.ainvoke(PROBE_PROMPT)
    except Exception as e:
        logger.error(f"OpenAI probe failed: {e}")
        raise ProviderProbeError("OpenAI connectivity check failed") from e

    metadata = getattr(response, "response_metadata", None) or {}
    return {
        "message": str(response.text),
        "model": metadata.get("model_name", settings.openai_probe_model),
    }
