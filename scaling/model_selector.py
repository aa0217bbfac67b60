"""Model selection for text-only and screenshot-attached requests."""

import logging

from config import Settings

logger = logging.getLogger(__name__)


def get_model(settings: Settings, artifact: str = "", with_image: bool = False) -> str:
    """Return the model to use for one request.

    Requests carrying a screenshot go to the vision model; everything else
    uses the configured text model.
    """
    model = settings.llm_vision_model if with_image else settings.llm_model
    logger.debug(f"[model_selector] {artifact}: using '{model}'{' (vision)' if with_image else ''}")
    return model
