"""Routes package for FastAPI endpoints.

This package contains all API route modules for the survey service.
"""

from survey_hub.routes import access, health, reports, responses, setup, surveys

__all__ = ["access", "health", "reports", "responses", "setup", "surveys"]
