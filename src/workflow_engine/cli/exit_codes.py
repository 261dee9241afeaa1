"""Exit codes for the workflow-engine CLI.

- 0: Success (every mandatory step succeeded)
- 1: Pipeline failed (one or more mandatory steps failed)
- 2: Invalid usage (bad arguments, bad config)
- 3: Environment error (local fault before or while preparing the pipeline)

These are the CLI's own codes. The process runner's sentinel codes
(230-232) live in ``workflow_engine.shell.exit_codes``.
"""

from __future__ import annotations

EXIT_SUCCESS = 0
EXIT_PIPELINE_FAILURE = 1
EXIT_INVALID_USAGE = 2
EXIT_ENVIRONMENT_ERROR = 3
