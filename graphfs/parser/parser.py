"""LinkedDoc RDF parser.

Extracts the metadata block delimited by ``<!-- LinkedDoc RDF -->`` and
``<!-- End LinkedDoc RDF -->`` and parses its constrained Turtle subset:

    @prefix code: <https://schema.codedoc.org/> .

    <#main.go> a code:Module ;
        code:name "main.go" ;
        code:linksTo <./util.go>, <./db.go> ;
        code:config [ code:name "db" ; code:path "../db.go" ] .

Statements run until a terminating ``.`` and may span any number of lines;
``;`` separates predicate-object groups and ``,`` separates objects sharing
a predicate. Blank nodes (``[ ... ]``) are parsed recursively with explicit
bracket tracking, so they may nest and cross line boundaries.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from graphfs.parser.triple import URI, BlankNode, Literal, Triple, TripleObject

logger = logging.getLogger(__name__)

START_MARKER = "<!-- LinkedDoc RDF -->"
END_MARKER = "<!-- End LinkedDoc RDF -->"

RDF_NS = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
RDF_TYPE = RDF_NS + "type"

# Prefixes available without an @prefix declaration
STANDARD_PREFIXES = {
    "rdf": RDF_NS,
    "rdfs": "http://www.w3.org/2000/01/rdf-schema#",
    "xsd": "http://www.w3.org/2001/XMLSchema#",
    "code": "https://schema.codedoc.org/",
}

_PREFIX_RE = re.compile(r"^@prefix\s+([A-Za-z_][\w.-]*)?:\s*<([^>]*)>\s*\.$")
_PNAME_RE = re.compile(r"^([A-Za-z_][\w.-]*)?:(\S*)$")
_WORD_STOP = set(' \t<>"[];,')


class GrammarError(ValueError):
    """Malformed LinkedDoc block.

    ``line`` counts from the first line of the text handed to the parser:
    the whole file for ``parse_string``/``parse_file`` and
    ``extract_block``, the block itself for ``parse``.
    """

    def __init__(self, message: str, line: int | None = None) -> None:
        self.message = message
        self.line = line
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.line:
            return f"parse error at line {self.line}: {self.message}"
        return f"parse error: {self.message}"


@dataclass(frozen=True)
class _Token:
    kind: str  # iri, pname, string, word, or the punctuation itself
    value: str
    line: int


def extract_block(content: str) -> str:
    """Return the trimmed text between the LinkedDoc markers.

    Returns an empty string when the start marker is absent.

    Raises:
        GrammarError: The start marker has no matching end marker.
    """
    return locate_block(content)[0]


def locate_block(content: str) -> tuple[str, int]:
    """Return the trimmed block and the file line its first line sits on.

    The line is 0 when there is no block.
    """
    start = content.find(START_MARKER)
    if start == -1:
        return "", 0
    body_start = start + len(START_MARKER)
    end = content.find(END_MARKER, body_start)
    if end == -1:
        line = content.count("\n", 0, start) + 1
        raise GrammarError(
            f"LinkedDoc block not closed (missing {END_MARKER})", line=line
        )
    raw = content[body_start:end]
    block = raw.strip()
    if not block:
        return "", 0
    lead = len(raw) - len(raw.lstrip())
    return block, content.count("\n", 0, body_start + lead) + 1


def _tokenize_line(text: str, lineno: int) -> list[_Token]:
    tokens = []
    i, n = 0, len(text)
    while i < n:
        c = text[i]
        if c.isspace():
            i += 1
        elif c == "<":
            end = text.find(">", i + 1)
            if end == -1:
                raise GrammarError("unterminated URI reference", line=lineno)
            tokens.append(_Token("iri", text[i + 1 : end], lineno))
            i = end + 1
        elif c == '"':
            value, i = _read_string(text, i, lineno)
            tokens.append(_Token("string", value, lineno))
        elif c in "[];,":
            tokens.append(_Token(c, c, lineno))
            i += 1
        elif c == "." and (i + 1 == n or text[i + 1].isspace()):
            tokens.append(_Token(".", ".", lineno))
            i += 1
        else:
            j = i
            while j < n and text[j] not in _WORD_STOP:
                j += 1
            word = text[i:j]
            # A trailing '.' before whitespace/end terminates the statement
            if word.endswith(".") and len(word) > 1 and (j == n or text[j].isspace()):
                tokens.append(_Token(_word_kind(word[:-1]), word[:-1], lineno))
                tokens.append(_Token(".", ".", lineno))
            else:
                tokens.append(_Token(_word_kind(word), word, lineno))
            i = j
    return tokens


def _word_kind(word: str) -> str:
    return "pname" if _PNAME_RE.match(word) else "word"


def _read_string(text: str, start: int, lineno: int) -> tuple[str, int]:
    """Read a double-quoted literal starting at *start*; return (value, next index)."""
    out = []
    i = start + 1
    n = len(text)
    while i < n:
        c = text[i]
        if c == "\\" and i + 1 < n:
            nxt = text[i + 1]
            out.append({"n": "\n", "t": "\t", "r": "\r"}.get(nxt, nxt))
            i += 2
            continue
        if c == '"':
            i += 1
            # Language tags and datatypes are accepted and dropped
            if i < n and text[i] == "@":
                i += 1
                while i < n and (text[i].isalnum() or text[i] == "-"):
                    i += 1
            elif text.startswith("^^", i):
                i += 2
                if i < n and text[i] == "<":
                    end = text.find(">", i)
                    i = n if end == -1 else end + 1
                else:
                    while i < n and text[i] not in _WORD_STOP:
                        i += 1
                    if text[i - 1] == "." and (i == n or text[i].isspace()):
                        i -= 1
            return "".join(out), i
        out.append(c)
        i += 1
    raise GrammarError("unterminated string literal", line=lineno)


class _BlockReader:
    """Recursive-descent reader over the tokens of one block."""

    def __init__(self, tokens: list[_Token], prefixes: dict[str, str]) -> None:
        self.tokens = tokens
        self.pos = 0
        self.prefixes = prefixes
        self._bnode_count = 0

    def peek(self) -> _Token | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def next(self) -> _Token:
        tok = self.peek()
        if tok is None:
            last = self.tokens[-1].line if self.tokens else None
            raise GrammarError("unexpected end of block", line=last)
        self.pos += 1
        return tok

    def expand(self, pname: str) -> str:
        prefix, _, local = pname.partition(":")
        base = self.prefixes.get(prefix)
        if base is None:
            logger.debug("Undeclared prefix %r in %s", prefix, pname)
            return pname
        return base + local

    def read_statements(self) -> list[Triple]:
        triples: list[Triple] = []
        while self.peek() is not None:
            if self.peek().kind == ".":
                # Stray terminator, e.g. after a trailing ';'
                self.pos += 1
                continue
            subject = self.read_subject()
            self.read_predicate_objects(subject, triples, closing=".")
            tok = self.peek()
            if tok is None:
                break
            if tok.kind != ".":
                raise GrammarError(
                    f"expected '.' to end statement, found {tok.value!r}", line=tok.line
                )
            self.pos += 1
        return triples

    def read_subject(self) -> str:
        tok = self.next()
        if tok.kind == "iri":
            return tok.value
        if tok.kind == "pname":
            return self.expand(tok.value)
        if tok.kind == "[":
            raise GrammarError("blank node subjects are not supported", line=tok.line)
        raise GrammarError(f"expected subject, found {tok.value!r}", line=tok.line)

    def read_predicate(self) -> str:
        tok = self.next()
        if tok.kind == "word" and tok.value == "a":
            return RDF_TYPE
        if tok.kind == "iri":
            return tok.value
        if tok.kind == "pname":
            return self.expand(tok.value)
        raise GrammarError(f"expected predicate, found {tok.value!r}", line=tok.line)

    def read_predicate_objects(
        self, subject: str, out: list[Triple], closing: str
    ) -> None:
        while True:
            predicate = self.read_predicate()
            out.append(Triple(subject, predicate, self.read_object()))
            while self.peek() is not None and self.peek().kind == ",":
                self.pos += 1
                out.append(Triple(subject, predicate, self.read_object()))

            if self.peek() is None or self.peek().kind != ";":
                return
            while self.peek() is not None and self.peek().kind == ";":
                self.pos += 1
            if self.peek() is None or self.peek().kind == closing:
                return

    def read_object(self) -> TripleObject:
        tok = self.next()
        if tok.kind == "iri":
            return URI(tok.value)
        if tok.kind == "pname":
            return URI(self.expand(tok.value))
        if tok.kind in ("string", "word"):
            return Literal(tok.value)
        if tok.kind == "[":
            return self.read_blank_node(tok)
        raise GrammarError(f"expected object, found {tok.value!r}", line=tok.line)

    def read_blank_node(self, opener: _Token) -> BlankNode:
        label = f"_:b{self._bnode_count}"
        self._bnode_count += 1
        inner: list[Triple] = []
        if self.peek() is not None and self.peek().kind != "]":
            self.read_predicate_objects(label, inner, closing="]")
        tok = self.peek()
        if tok is None or tok.kind != "]":
            raise GrammarError("blank node not closed (missing ']')", line=opener.line)
        self.pos += 1
        return BlankNode(label, tuple(inner))


class LinkedDocParser:
    """Parses LinkedDoc blocks into ordered triple lists.

    Prefix declarations only live for the duration of one parse call, so a
    single instance is safe to share between threads.
    """

    def extract_block(self, content: str) -> str:
        return extract_block(content)

    def parse(self, block: str, first_line: int = 1) -> list[Triple]:
        """Parse the text of a LinkedDoc block.

        *first_line* is the number reported for the block's first line.

        Raises:
            GrammarError: Malformed @prefix line, unbalanced brackets,
                unterminated literal or statement.
        """
        prefixes = dict(STANDARD_PREFIXES)
        tokens: list[_Token] = []

        for lineno, raw in enumerate(block.splitlines(), start=first_line):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            if line.startswith("@prefix"):
                match = _PREFIX_RE.match(line)
                if not match:
                    raise GrammarError(f"invalid @prefix syntax: {line}", line=lineno)
                prefixes[match.group(1) or ""] = match.group(2)
                continue
            tokens.extend(_tokenize_line(line, lineno))

        return _BlockReader(tokens, prefixes).read_statements()

    def parse_string(self, content: str) -> list[Triple]:
        """Extract the block from raw file text and parse it."""
        block, first_line = locate_block(content)
        if not block:
            return []
        return self.parse(block, first_line)

    def parse_file(self, path: str | Path) -> list[Triple]:
        content = Path(path).read_text(encoding="utf-8", errors="replace")
        return self.parse_string(content)


_default_parser = LinkedDocParser()


def parse(block: str) -> list[Triple]:
    """Parse LinkedDoc block text with a shared parser."""
    return _default_parser.parse(block)


def parse_string(content: str) -> list[Triple]:
    """Extract and parse the LinkedDoc block of raw file text."""
    return _default_parser.parse_string(content)
