"""Sentinel exit codes returned by the process runner.

- 0: Success (clean exit or dry run)
- 230: Forced termination of the child failed after cancellation
- 231: Cancellation fired and the child was killed
- 232: Unknown failure (spawn error, unclassified wait error)

Any other value is the child's own exit code, passed through verbatim.
"""

from __future__ import annotations

EXIT_OK = 0
EXIT_KILL_FAILURE = 230
EXIT_CONTEXT_CANCEL = 231
EXIT_UNKNOWN = 232

SENTINEL_DESCRIPTIONS = {
    EXIT_OK: "success",
    EXIT_KILL_FAILURE: "failed to kill process after cancellation",
    EXIT_CONTEXT_CANCEL: "cancelled",
    EXIT_UNKNOWN: "unknown failure",
}


def describe_exit_code(code: int) -> str:
    """Return a human readable description of an exit code."""
    if code in SENTINEL_DESCRIPTIONS:
        return SENTINEL_DESCRIPTIONS[code]
    return f"exit code {code}"
