"""
Core autoshadow Package

Contains the configuration layer and the error hierarchy shared by the
classification pipeline and its adapters.
"""

from autoshadow.core.exceptions import (
    AutoShadowError,
    ConfigurationError,
    FormatError,
    FetchError,
    AuthenticationError,
    StoreError,
    ParseError,
    ErrorCode,
    ErrorContext,
    RecoverySuggestion
)

__all__ = [
    'AutoShadowError',
    'ConfigurationError',
    'FormatError',
    'FetchError',
    'AuthenticationError',
    'StoreError',
    'ParseError',
    'ErrorCode',
    'ErrorContext',
    'RecoverySuggestion',
]
