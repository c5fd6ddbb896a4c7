"""
Base.py
-------
Common contract for every difficulty modifier: read providers and config,
return one SignalResult, never raise past calculate().
"""

import logging

from DDA_Models import SignalResult
from Modifier_Configs import ModifierConfig

logger = logging.getLogger(__name__)


class BaseModifier:
    """Subclasses set ``name`` and implement ``_evaluate``."""

    name = "Modifier"

    def __init__(self, config: ModifierConfig):
        self.config = config.sanitized()

    @property
    def priority(self) -> int:
        return self.config.priority

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    def _evaluate(self) -> SignalResult:
        raise NotImplementedError

    def calculate(self) -> SignalResult:
        """Evaluate the signal; failures come back as a zero result carrying the error."""
        try:
            result = self._evaluate()
        except Exception as e:
            logger.warning({"event": "modifier_error", "modifier": self.name, "error": str(e)})
            return SignalResult.no_change(
                self.name,
                reason=f"Error in {self.name}: {e}",
                error=f"{type(e).__name__}: {e}",
            )
        if result is None:
            return SignalResult.no_change(self.name)
        logger.debug(
            {"event": "modifier_result", "modifier": self.name, "value": round(result.value, 3), "reason": result.reason}
        )
        return result

    def _result(self, value: float, reason: str, **metadata) -> SignalResult:
        return SignalResult(name=self.name, value=value, reason=reason, metadata=metadata)
