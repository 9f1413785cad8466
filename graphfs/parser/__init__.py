"""LinkedDoc RDF block extraction and parsing."""

from graphfs.parser.parser import (
    END_MARKER,
    RDF_TYPE,
    START_MARKER,
    STANDARD_PREFIXES,
    GrammarError,
    LinkedDocParser,
    extract_block,
    locate_block,
    parse,
    parse_string,
)
from graphfs.parser.triple import (
    URI,
    BlankNode,
    Literal,
    Triple,
    local_name,
    scoped_label,
)

__all__ = [
    "END_MARKER",
    "RDF_TYPE",
    "START_MARKER",
    "STANDARD_PREFIXES",
    "URI",
    "BlankNode",
    "GrammarError",
    "LinkedDocParser",
    "Literal",
    "Triple",
    "extract_block",
    "local_name",
    "locate_block",
    "parse",
    "parse_string",
    "scoped_label",
]
