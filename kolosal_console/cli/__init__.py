"""Command-line tools for the Kolosal console.

- **ingest** -- parse, chunk and commit a file or literal text, or print
  the upstream status, using the same pipeline as the API.
"""
