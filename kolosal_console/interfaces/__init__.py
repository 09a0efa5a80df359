"""Public interface definitions for external service adapters.

Parser backends are accessed exclusively through :class:`IDocumentParser`.
Concrete adapters implement it and are injected at runtime, so the parser
dispatcher never knows which HTTP service it is talking to and tests can
swap in a mock.

CONCRETE PROVIDER MAP:
    Interface          →  Concrete implementations (in kolosal_console/providers/parser/)
    ─────────────────────────────────────────────────────────────────────
    IDocumentParser    →  KolosalFastParser, MarkItDownParser, DoclingParser
"""

from kolosal_console.interfaces.document_parser import IDocumentParser

__all__ = ["IDocumentParser"]
