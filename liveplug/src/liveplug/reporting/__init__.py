from .fakes import CollectingErrorSink, DisplayCall
from .reporter import ErrorReporter, format_message, format_title
from .sinks import LoggingErrorSink

__all__ = [
    "ErrorReporter",
    "format_message",
    "format_title",
    "LoggingErrorSink",
    "CollectingErrorSink",
    "DisplayCall",
]
