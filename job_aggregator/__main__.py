from __future__ import annotations
from job_aggregator.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
