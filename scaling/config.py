"""Centralized limits, pricing and cost controls for generation calls."""

# Captured stylesheet limits per page
MAX_STYLESHEETS_PER_PAGE: int = 5
MAX_STYLESHEET_BYTES: int = 500_000

# Screenshots above this base64 size are sent text-only
MAX_IMAGE_BASE64_KB: int = 15_000

# Prompt material limits (values beyond these are dropped from the prompt)
PROMPT_LIMITS: dict[str, int] = {
    "colors": 30,
    "font_families": 3,
    "font_sizes": 15,
    "spacing": 20,
    "border_radius": 8,
    "box_shadows": 5,
    "border_colors": 10,
}

# Model pricing per 1M tokens (USD)
MODEL_PRICING: dict[str, dict[str, float]] = {
    "gpt-4o-mini": {"input": 0.15, "output": 0.60},
    "gpt-4o": {"input": 2.50, "output": 10.00},
    "gpt-4-turbo": {"input": 10.00, "output": 30.00},
    "gpt-4.1": {"input": 2.00, "output": 8.00},
    "gpt-4.1-mini": {"input": 0.40, "output": 1.60},
}


def calculate_cost(
    model: str, input_tokens: int, output_tokens: int
) -> float:
    """Return estimated cost in USD for a single LLM call."""
    pricing = MODEL_PRICING.get(model, {"input": 0.0, "output": 0.0})
    cost = (input_tokens * pricing["input"] + output_tokens * pricing["output"]) / 1_000_000
    return round(cost, 6)
