"""Transport-agnostic request boundary."""

import logging
from typing import Any, Dict, Optional, Tuple

from .errors import PipelineError, RequestValidationError
from .pipeline import Orchestrator

logger = logging.getLogger(__name__)

_default_orchestrator: Optional[Orchestrator] = None


def _orchestrator() -> Orchestrator:
    global _default_orchestrator
    if _default_orchestrator is None:
        _default_orchestrator = Orchestrator()
    return _default_orchestrator


def handle_generate(
    payload: Any,
    orchestrator: Optional[Orchestrator] = None,
) -> Tuple[int, Dict[str, Any]]:
    """Run one generation request.

    Args:
        payload: Decoded JSON body.
        orchestrator: Pipeline to use; a shared default is built lazily.

    Returns:
        (status code, body): 200 with the camelCase result, 400 with
        ``{"error": ...}`` for invalid requests, 500 otherwise.
    """
    try:
        result = (orchestrator or _orchestrator()).generate(payload)
    except RequestValidationError as e:
        logger.info(f"Rejected request: {e}")
        return 400, {"error": str(e)}
    except PipelineError as e:
        logger.error(f"Generation error: {e}")
        return 500, {"error": str(e) or "Unexpected error occurred"}

    return 200, result.to_payload()
