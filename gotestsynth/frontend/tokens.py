"""Go tokenizer - lexes source into a flat token list with automatic semicolons."""

from __future__ import annotations


# Token type constants
TK_INT = "INT"
TK_FLOAT = "FLOAT"
TK_IMAG = "IMAG"
TK_STRING = "STRING"
TK_RUNE = "RUNE"
TK_IDENT = "IDENT"
TK_OP = "OP"
TK_EOF = "EOF"

KEYWORDS: set[str] = {
    "break",
    "case",
    "chan",
    "const",
    "continue",
    "default",
    "defer",
    "else",
    "fallthrough",
    "for",
    "func",
    "go",
    "goto",
    "if",
    "import",
    "interface",
    "map",
    "package",
    "range",
    "return",
    "select",
    "struct",
    "switch",
    "type",
    "var",
}

# Multi-character operators, sorted by length descending for greedy matching
MULTI_OPS: list[str] = [
    "<<=",
    ">>=",
    "&^=",
    "...",
    "&&",
    "||",
    "<-",
    "++",
    "--",
    "==",
    "!=",
    "<=",
    ">=",
    ":=",
    "<<",
    ">>",
    "&^",
    "+=",
    "-=",
    "*=",
    "/=",
    "%=",
    "&=",
    "|=",
    "^=",
]

SINGLE_OPS: set[str] = {
    "+",
    "-",
    "*",
    "/",
    "%",
    "&",
    "|",
    "^",
    "~",
    "!",
    "<",
    ">",
    "=",
    "(",
    ")",
    "[",
    "]",
    "{",
    "}",
    ",",
    ":",
    ";",
    ".",
}

# A newline after one of these ends the statement.
_SEMI_KEYWORDS: set[str] = {"break", "continue", "fallthrough", "return"}
_SEMI_OPS: set[str] = {"++", "--", ")", "]", "}"}


class TokenizeError(Exception):
    """Error during tokenization."""

    def __init__(self, msg: str, line: int, col: int):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        super().__init__(msg + " at line " + str(line) + " col " + str(col))


class Token:
    """A token with type, value, and position."""

    def __init__(self, type_: str, value: str, line: int, col: int):
        self.type: str = type_
        self.value: str = value
        self.line: int = line
        self.col: int = col

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value!r}, {self.line}, {self.col})"


def _is_digit(c: str) -> bool:
    return c >= "0" and c <= "9"


def _is_alpha(c: str) -> bool:
    return c.isalpha() or c == "_"


def _is_alnum(c: str) -> bool:
    return _is_alpha(c) or _is_digit(c)


def _ends_statement(tok: Token) -> bool:
    if tok.type in (TK_IDENT, TK_INT, TK_FLOAT, TK_IMAG, TK_STRING, TK_RUNE):
        return True
    if tok.type in _SEMI_KEYWORDS:
        return True
    return tok.type == TK_OP and tok.value in _SEMI_OPS


def _auto_semicolon(tokens: list[Token], line: int, col: int) -> None:
    if tokens and _ends_statement(tokens[-1]):
        tokens.append(Token(TK_OP, ";", line, col))


def tokenize(source: str) -> list[Token]:
    """Tokenize Go source into a flat list ending with TK_EOF."""
    tokens: list[Token] = []
    pos = 0
    line = 1
    col = 1
    length = len(source)

    while pos < length:
        c = source[pos]

        if c == "\n":
            _auto_semicolon(tokens, line, col)
            pos += 1
            line += 1
            col = 1
            continue

        if c == " " or c == "\t" or c == "\r":
            pos += 1
            col += 1
            continue

        # Line comment
        if c == "/" and pos + 1 < length and source[pos + 1] == "/":
            while pos < length and source[pos] != "\n":
                pos += 1
            continue

        # Block comment; one spanning a newline acts like a newline
        if c == "/" and pos + 1 < length and source[pos + 1] == "*":
            end = source.find("*/", pos + 2)
            if end < 0:
                raise TokenizeError("unterminated block comment", line, col)
            text = source[pos : end + 2]
            newlines = text.count("\n")
            if newlines > 0:
                _auto_semicolon(tokens, line, col)
                line += newlines
                col = len(text) - text.rfind("\n")
            else:
                col += len(text)
            pos = end + 2
            continue

        start_pos = pos
        start_line = line
        start_col = col

        # Number (decimal, hex, octal, binary, float, imaginary)
        if _is_digit(c) or (c == "." and pos + 1 < length and _is_digit(source[pos + 1])):
            kind = TK_INT
            while pos < length and (_is_alnum(source[pos]) or source[pos] == "."):
                if source[pos] == ".":
                    if pos + 2 < length and source[pos + 1] == "." and source[pos + 2] == ".":
                        break
                    kind = TK_FLOAT
                elif source[pos] in "eEpP" and not source[start_pos:pos].lower().startswith("0x"):
                    kind = TK_FLOAT
                    if pos + 1 < length and source[pos + 1] in "+-":
                        pos += 1
                pos += 1
            raw = source[start_pos:pos]
            if raw.endswith("i"):
                kind = TK_IMAG
            col += pos - start_pos
            tokens.append(Token(kind, raw, start_line, start_col))
            continue

        # Interpreted string literal
        if c == '"':
            pos += 1
            while pos < length and source[pos] != '"':
                if source[pos] == "\n":
                    raise TokenizeError("unterminated string literal", start_line, start_col)
                if source[pos] == "\\":
                    pos += 1
                pos += 1
            if pos >= length:
                raise TokenizeError("unterminated string literal", start_line, start_col)
            pos += 1
            raw = source[start_pos:pos]
            col += pos - start_pos
            tokens.append(Token(TK_STRING, raw, start_line, start_col))
            continue

        # Raw string literal
        if c == "`":
            end = source.find("`", pos + 1)
            if end < 0:
                raise TokenizeError("unterminated raw string literal", start_line, start_col)
            raw = source[pos : end + 1]
            newlines = raw.count("\n")
            line += newlines
            if newlines > 0:
                col = len(raw) - raw.rfind("\n")
            else:
                col += len(raw)
            pos = end + 1
            tokens.append(Token(TK_STRING, raw, start_line, start_col))
            continue

        # Rune literal
        if c == "'":
            pos += 1
            while pos < length and source[pos] != "'":
                if source[pos] == "\n":
                    raise TokenizeError("unterminated rune literal", start_line, start_col)
                if source[pos] == "\\":
                    pos += 1
                pos += 1
            if pos >= length:
                raise TokenizeError("unterminated rune literal", start_line, start_col)
            pos += 1
            raw = source[start_pos:pos]
            col += pos - start_pos
            tokens.append(Token(TK_RUNE, raw, start_line, start_col))
            continue

        # Identifier or keyword
        if _is_alpha(c):
            while pos < length and _is_alnum(source[pos]):
                pos += 1
            word = source[start_pos:pos]
            col += pos - start_pos
            if word in KEYWORDS:
                tokens.append(Token(word, word, start_line, start_col))
            else:
                tokens.append(Token(TK_IDENT, word, start_line, start_col))
            continue

        matched = False
        for op in MULTI_OPS:
            op_len = len(op)
            if source[pos : pos + op_len] == op:
                tokens.append(Token(TK_OP, op, start_line, start_col))
                pos += op_len
                col += op_len
                matched = True
                break
        if matched:
            continue

        if c in SINGLE_OPS:
            tokens.append(Token(TK_OP, c, start_line, start_col))
            pos += 1
            col += 1
            continue

        raise TokenizeError("unexpected character: " + repr(c), line, col)

    _auto_semicolon(tokens, line, col)
    tokens.append(Token(TK_EOF, "", line, col))
    return tokens
