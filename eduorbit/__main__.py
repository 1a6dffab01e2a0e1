"""Allow ``python -m eduorbit``."""

from eduorbit.cli import main

main()
