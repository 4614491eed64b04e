"""fnmap: structural index and call graph for JavaScript/TypeScript sources."""

from .analyzer import analyze_source
from .errors import ErrorType, FnmapError, FnmapSyntaxError
from .models import FileEntry, Module
from .processor import ProcessResult, process_file

__version__ = "0.1.0"

__all__ = [
    "ErrorType",
    "FileEntry",
    "FnmapError",
    "FnmapSyntaxError",
    "Module",
    "ProcessResult",
    "__version__",
    "analyze_source",
    "process_file",
]
