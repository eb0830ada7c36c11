"""Primary call, one retry, then heuristic: the failure ladder every scoring stage uses.

Each reasoning attempt resolves to a tagged ``Success`` or ``Failure`` value
instead of raising, and ``run_ladder`` walks an explicit state table over
those values. The heuristic rung is a pure callable and always terminates
the ladder with a valid result.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Generic, TypeVar, Union

from portfolio_scanner.core.exceptions import MalformedResponse, is_credit_error
from portfolio_scanner.core.llm import ReasoningClient, ReasoningParams
from portfolio_scanner.core.logging import get_logger, log_with_context

logger = get_logger(__name__)

T = TypeVar("T")


class LadderPath(str, Enum):
    """Which rung produced a result."""

    PRIMARY = "primary"
    RETRY = "retry"
    HEURISTIC = "heuristic"


class FailureKind(str, Enum):
    SERVICE_UNAVAILABLE = "service_unavailable"
    MALFORMED_RESPONSE = "malformed_response"


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    detail: str


AttemptResult = Union[Success[T], Failure]


class LadderState(str, Enum):
    PRIMARY_CALL = "primary_call"
    RETRY_CALL = "retry_call"
    HEURISTIC_FALLBACK = "heuristic_fallback"


# Where a failed call sends the ladder next. There is no edge back to a call state.
_ON_FAILURE = {
    LadderState.PRIMARY_CALL: LadderState.RETRY_CALL,
    LadderState.RETRY_CALL: LadderState.HEURISTIC_FALLBACK,
}

_PATH_FOR_STATE = {
    LadderState.PRIMARY_CALL: LadderPath.PRIMARY,
    LadderState.RETRY_CALL: LadderPath.RETRY,
}


@dataclass(frozen=True)
class LadderRequest:
    """Identical inputs are sent on the primary and retry calls."""

    system_instructions: str
    user_payload: str
    params: ReasoningParams


@dataclass(frozen=True)
class LadderOutcome(Generic[T]):
    value: T
    path: LadderPath
    calls: int
    failures: tuple[Failure, ...] = field(default_factory=tuple)
    client_configured: bool = True

    @property
    def used_heuristic(self) -> bool:
        return self.path is LadderPath.HEURISTIC

    @property
    def credit_error(self) -> bool:
        return any(
            f.kind is FailureKind.SERVICE_UNAVAILABLE and is_credit_error(f.detail)
            for f in self.failures
        )

    def degradation_flags(self) -> list[str]:
        """Flags describing why the heuristic rung was used, if it was."""
        if not self.used_heuristic:
            return []
        flags = ["heuristic_scoring"]
        if not self.client_configured:
            flags.append("no_api_key")
        elif self.credit_error:
            flags.append("credit_error")
        return flags

    def flagged_value(self) -> T:
        """The value, with degradation flags merged into its ``flags`` list."""
        extra = self.degradation_flags()
        current = list(getattr(self.value, "flags", None) or [])
        missing = [f for f in extra if f not in current]
        if not missing:
            return self.value
        return self.value.model_copy(update={"flags": [*current, *missing]})


async def attempt_call(
    client: ReasoningClient,
    request: LadderRequest,
    parse: Callable[[str], T],
    timeout_s: float | None = None,
) -> AttemptResult[T]:
    """
    Make one reasoning call and parse it, folding errors into a tagged result.

    Cancellation is not caught and propagates to the caller.
    """
    try:
        raw = await asyncio.wait_for(
            client.call(request.system_instructions, request.user_payload, request.params),
            timeout=timeout_s,
        )
    except asyncio.TimeoutError:
        return Failure(FailureKind.SERVICE_UNAVAILABLE, f"timed out after {timeout_s}s")
    except Exception as e:
        return Failure(FailureKind.SERVICE_UNAVAILABLE, f"{type(e).__name__}: {e}")

    try:
        return Success(parse(raw))
    except (MalformedResponse, ValueError, TypeError) as e:
        # pydantic.ValidationError is a ValueError
        return Failure(FailureKind.MALFORMED_RESPONSE, f"{type(e).__name__}: {str(e)[:300]}")


async def run_ladder(
    client: ReasoningClient | None,
    request: LadderRequest,
    parse: Callable[[str], T],
    fallback: Callable[[], T],
    *,
    label: str,
    timeout_s: float | None = None,
    **log_context: Any,
) -> LadderOutcome[T]:
    """
    Resolve one scoring stage through primary call, retry and heuristic.

    Args:
        client: Reasoning client, or None to go straight to the heuristic
        request: Prompt and generation parameters (reused verbatim on retry)
        parse: Turns raw text into the stage's value; raises on bad output
        fallback: Pure heuristic producing the stage's value
        label: Stage name used in logs
        timeout_s: Per-call timeout
        **log_context: Extra fields for the path log line

    Returns:
        LadderOutcome with the value, the path taken and the number of calls
    """
    if client is None:
        value = fallback()
        log_with_context(
            logger, logging.INFO, f"{label}: no reasoning client, used heuristic",
            stage=label, path=LadderPath.HEURISTIC.value, calls=0, **log_context,
        )
        return LadderOutcome(value, LadderPath.HEURISTIC, calls=0, client_configured=False)

    failures: list[Failure] = []
    calls = 0
    state = LadderState.PRIMARY_CALL

    while state is not LadderState.HEURISTIC_FALLBACK:
        calls += 1
        result = await attempt_call(client, request, parse, timeout_s)
        if isinstance(result, Success):
            path = _PATH_FOR_STATE[state]
            log_with_context(
                logger, logging.INFO, f"{label}: resolved via {path.value}",
                stage=label, path=path.value, calls=calls, **log_context,
            )
            return LadderOutcome(result.value, path, calls, tuple(failures))

        failures.append(result)
        log_with_context(
            logger, logging.WARNING, f"{label}: {state.value} failed ({result.kind.value})",
            stage=label, failure=result.detail[:200], **log_context,
        )
        state = _ON_FAILURE[state]

    value = fallback()
    log_with_context(
        logger, logging.ERROR, f"{label}: both calls failed, used heuristic",
        stage=label, path=LadderPath.HEURISTIC.value, calls=calls, **log_context,
    )
    return LadderOutcome(value, LadderPath.HEURISTIC, calls, tuple(failures))
