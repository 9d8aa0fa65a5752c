# File: pmtool/api/__init__.py
"""
API package for PMTool.

This package contains the API layer for the PMTool application,
including endpoints, dependencies, and routing configuration.
"""

from pmtool.api import deps, endpoints
from pmtool.api.api import api_router
