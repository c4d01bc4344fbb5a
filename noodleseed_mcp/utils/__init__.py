"""
Utility modules
"""

from .fast_json import dumps, loads, JSONDecodeError

__all__ = ['dumps', 'loads', 'JSONDecodeError']
