"""Allow ``python -m workflow_engine.cli``."""

from workflow_engine.cli import main

if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
