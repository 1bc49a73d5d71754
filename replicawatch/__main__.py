"""Allow ``python -m replicawatch``."""

from replicawatch.cli import main

raise SystemExit(main())
