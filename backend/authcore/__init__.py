"""Expose the application factory at package level.

``from authcore import create_app`` is the supported entry point for WSGI
servers and the Flask CLI (``FLASK_APP=authcore``).
"""

from __future__ import annotations

from .factory import create_app

__all__ = ["create_app"]
