"""
Utility modules for churnmap.
Provides common functionality for logging and file I/O.
"""

from .logging_utils import setup_logger, get_logger
from .file_utils import load_config, load_records, infer_columns, write_rows, save_json

__all__ = [
    'setup_logger',
    'get_logger',
    'load_config',
    'load_records',
    'infer_columns',
    'write_rows',
    'save_json',
]
