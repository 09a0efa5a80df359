"""Allow ``python -m kolosal_console.cli`` execution."""

from kolosal_console.cli.ingest import main

main()
