"""
FRMS Parsers
============

Ingestion side of the engine: logbook sectors to duty records.
"""

from frms_parsers.logbook_parser import LogbookSector, LogbookParser

__all__ = [
    'LogbookSector',
    'LogbookParser',
]
