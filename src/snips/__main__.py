"""Allow ``python -m snips``."""

from snips.cli import main

main()
