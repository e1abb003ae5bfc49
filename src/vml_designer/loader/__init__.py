"""Import, materialization and form lifecycle."""

from .importer import Importer, ImportResult, source_key
from .materializer import Materializer
from .events import EventBinder, parse_handler
from .forms import FormManager

__all__ = [
    "Importer",
    "ImportResult",
    "source_key",
    "Materializer",
    "EventBinder",
    "parse_handler",
    "FormManager",
]
