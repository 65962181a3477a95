"""Allow ``python -m levante_catalog``."""

from levante_catalog.cli import main

main()
