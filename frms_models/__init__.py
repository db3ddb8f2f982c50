"""
FRMS Data Models
================

Duty records, enumerations and immutable result objects.
"""
