"""
Database package for PMTool: models and session management.
"""
