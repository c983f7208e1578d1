"""
Central configuration for cycletime tunables and shared constants.
"""

import logging
import os

TRACE: int = 5
logging.addLevelName(TRACE, "TRACE")
# Add Logger.trace if missing
if not hasattr(logging.Logger, "trace"):

    def _trace(self, msg, *args, **kwargs):
        if self.isEnabledFor(TRACE):
            self._log(TRACE, msg, args, **kwargs)

    logging.Logger.trace = _trace  # type: ignore[attr-defined]
    logging.TRACE = TRACE  # type: ignore[attr-defined]

logger = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {name}={raw!r}, using {default}")
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={raw!r}, using {default}")
        return default


# Traverse rate used for every G0 move (mm/min)
RAPID_RATE_MM_MIN: float = _env_float("CYCLETIME_RAPID_RATE", 10000.0)

# Spindle ceiling applied when the caller does not supply one (RPM)
DEFAULT_RPM_CEILING: float = _env_float("CYCLETIME_RPM_MAX", 4000.0)

# Mill B axis indexing speed (deg/s)
ROTARY_RATE_DEG_S: float = 30.0

# G76 depths are programmed in micrometers
THREAD_DEPTH_SCALE: float = 0.001

# Sentinel label closing a REPEAT range
REPEAT_END_LABEL: str = os.getenv("CYCLETIME_REPEAT_END_LABEL", "ENDLABEL").strip().upper()

# Upper bound on expander instruction-pointer steps (guards GOTO loops)
MAX_EXPANSION_STEPS: int = _env_int("CYCLETIME_MAX_STEPS", 100_000)

# "one-shot" closes a modal drill call after one position, "modal" keeps it
DRILL_POLICY_DEFAULT: str = os.getenv("CYCLETIME_DRILL_POLICY", "one-shot").strip().lower()

LOG_LEVEL_DEFAULT: str = "WARNING"
