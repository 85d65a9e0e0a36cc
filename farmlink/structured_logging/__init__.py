"""
Structured logging package for FarmLink.

All imports should use explicit paths like
'from farmlink.structured_logging.enhanced_logging_config import get_logger'.

The directory is named 'structured_logging' rather than 'logging' so it never
shadows the standard library module.
"""

__all__: list[str] = []
