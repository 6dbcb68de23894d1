"""Allow ``python -m bizknowledge.cli`` execution."""

from bizknowledge.cli.manage import main

main()
