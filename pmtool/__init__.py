"""
PMTool: projects, tasks and task dependency ordering behind a FastAPI service.
"""

__version__ = "1.0.0"
