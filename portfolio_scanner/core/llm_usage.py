"""LLM usage logging and cost estimation."""

from portfolio_scanner.core.logging import get_logger

logger = get_logger(__name__)

# Pricing per 1M tokens: (input, output)
MODEL_PRICING: dict[str, tuple[float, float]] = {
    # Anthropic
    "claude-opus-4-5-20251101": (15.0, 75.0),
    "claude-sonnet-4-5-20250929": (3.0, 15.0),
    "claude-sonnet-4-20250514": (3.0, 15.0),
    "claude-haiku-4-5-20251001": (0.80, 4.0),
    # OpenAI
    "gpt-4o": (2.50, 10.0),
    "gpt-4o-mini": (0.15, 0.60),
}

# Planning figures for a single scoring call, used before real usage is known
ESTIMATED_INPUT_TOKENS_PER_CALL = 3000
ESTIMATED_OUTPUT_TOKENS_PER_CALL = 2000


def estimate_cost(model: str, tokens_input: int, tokens_output: int) -> float:
    """Estimate cost in USD based on model pricing."""
    pricing = MODEL_PRICING.get(model)
    if not pricing:
        # Try prefix match for model variants
        for key, val in MODEL_PRICING.items():
            if model.startswith(key.rsplit("-", 1)[0]):
                pricing = val
                break
    if not pricing:
        logger.warning(f"No pricing found for model '{model}', using $0")
        return 0.0

    input_rate, output_rate = pricing
    cost = (tokens_input * input_rate / 1_000_000) + (tokens_output * output_rate / 1_000_000)
    return round(cost, 6)


def estimate_pipeline_cost(model: str, llm_calls: int) -> float:
    """Estimate the cost of ``llm_calls`` scoring calls at planning token sizes."""
    per_call = estimate_cost(
        model, ESTIMATED_INPUT_TOKENS_PER_CALL, ESTIMATED_OUTPUT_TOKENS_PER_CALL
    )
    return round(per_call * llm_calls, 4)


def log_llm_usage(
    workflow: str,
    model: str,
    provider: str,
    tokens_input: int,
    tokens_output: int,
    duration_ms: int = 0,
) -> None:
    """Log one reasoning call's token usage and estimated cost."""
    estimated = estimate_cost(model, tokens_input, tokens_output)
    logger.debug(
        f"LLM usage: {workflow} model={model} provider={provider} "
        f"tokens={tokens_input}+{tokens_output} cost=${estimated:.4f} duration_ms={duration_ms}"
    )
