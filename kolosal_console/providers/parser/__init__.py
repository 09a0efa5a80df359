"""Document parser adapters.

Three concrete implementations of IDocumentParser
(kolosal_console/interfaces/document_parser.py):
    - KolosalFastParser  - base64 JSON upload to the kolosal server, fast mode
    - MarkItDownParser   - multipart upload to the markitdown service
    - DoclingParser      - multipart upload to the docling OCR service

main.py builds all three and hands them to the ParserDispatcher.
"""

from kolosal_console.providers.parser.docling_parser import DoclingParser
from kolosal_console.providers.parser.kolosal_fast_parser import KolosalFastParser
from kolosal_console.providers.parser.markitdown_parser import MarkItDownParser

__all__ = ["DoclingParser", "KolosalFastParser", "MarkItDownParser"]
