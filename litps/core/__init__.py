"""
LitPS Core Module
"""
from .model import (
    PathOp, PathElement, TextElement, BoundingBox, Page, PageModel,
    A4_WIDTH, A4_HEIGHT
)
from .tokenizer import (
    PSLexer, PSToken, PSTokenType, DSCHeader,
    extract_dsc_header, parse_bounding_box, split_lines
)
from .transform import CoordinateTransform
from .interpreter import GraphicsState, PostScriptParser, parse_postscript, read_source
from .content_stream import ContentStreamRenderer, escape_pdf_string, format_number
from .pdf_objects import PDFObject, PDFObjectBuilder, PDFObjectGraph
from .writer import PDFWriter, generate, write_pdf
from .pdf_reader import PDFReader, PDFRef, XRefEntry, read_pdf, verify_pdf

__all__ = [
    # Page model
    'PathOp', 'PathElement', 'TextElement', 'BoundingBox', 'Page', 'PageModel',
    'A4_WIDTH', 'A4_HEIGHT',
    # Tokenizer
    'PSLexer', 'PSToken', 'PSTokenType', 'DSCHeader',
    'extract_dsc_header', 'parse_bounding_box', 'split_lines',
    # Interpreter
    'CoordinateTransform', 'GraphicsState', 'PostScriptParser',
    'parse_postscript', 'read_source',
    # PDF output
    'ContentStreamRenderer', 'escape_pdf_string', 'format_number',
    'PDFObject', 'PDFObjectBuilder', 'PDFObjectGraph',
    'PDFWriter', 'generate', 'write_pdf',
    # Reader
    'PDFReader', 'PDFRef', 'XRefEntry', 'read_pdf', 'verify_pdf',
]
