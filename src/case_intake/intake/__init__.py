"""
Archive → party.xml validation → extraction pipeline.
"""

from .archive import (
    locate_metadata_entry,
    open_archive,
    parse_whitelist,
    select_extractable_entries,
)
from .schema import load_schema, validate_and_extract_identifier
from .extraction import extract_entries, extract_entries_atomically
from .processor import CaseFileProcessor, make_case_folder_name

__all__ = [
    'CaseFileProcessor',
    'make_case_folder_name',
    'open_archive',
    'locate_metadata_entry',
    'select_extractable_entries',
    'parse_whitelist',
    'load_schema',
    'validate_and_extract_identifier',
    'extract_entries',
    'extract_entries_atomically',
]
