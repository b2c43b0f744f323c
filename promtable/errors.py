"""Errors raised while converting exposition text into rows."""


class ParseError(ValueError):
    """The exposition text could not be read into metric groups."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConversionError(Exception):
    """Base class for errors surfaced by MetricRowBuilder."""


class InvalidInputType(ConversionError, TypeError):
    """The value handed to the builder is not text."""

    def __init__(self, received: type):
        super().__init__("Wrong input type")
        self.received = received


class ParseFailure(ConversionError, ValueError):
    """The parser rejected the text; message is the parser's diagnostic."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
