"""Exception hierarchy shared by the lexer, the parsers and the exporters."""


class VexTabError(ValueError):
    """Base class for every error raised while reading VexTab notation."""


class ParseError(VexTabError):
    """A note-group violates the notes grammar."""


class LexError(ParseError):
    """The lexer could not produce a token."""


class UnexpectedEndOfInput(LexError):
    """A token was required but the note-group is exhausted."""

    def __init__(self) -> None:
        super().__init__("Unexpected end of line")


class UnexpectedCharacter(LexError):
    """The remaining input does not start with a recognised token."""

    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(f"Error parsing notes at: {text}")


class NumberOutOfRange(LexError):
    """A digit run does not fit in an unsigned 32-bit integer."""

    def __init__(self, digits: str) -> None:
        self.digits = digits
        shown = digits if len(digits) <= 20 else f"{digits[:20]}..."
        super().__init__(f"Number out of range: {shown}")


class DocumentError(VexTabError):
    """An error in a VexTab document, tagged with its 1-based line number."""

    def __init__(self, line: int, message: str) -> None:
        self.line = line
        self.message = message
        super().__init__(f"Line {line}: {message}")
