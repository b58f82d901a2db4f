# songfinder/api/__init__.py
"""
HTTP service package
"""

from .app import create_app

__all__ = ['create_app']
