"""FastAPI application and routes.

This module provides the REST API for the advisory service.

## API Structure

- /api/weather - Weather, forecast and farming advisories for a city
- /api/history - Recent searches
- /api/subscribers - Weather alert sign-ups
- /api/rules - Loaded advisory rule table and reload
- /health - Liveness check
"""

from agrisense.api.app import create_app

__all__ = ["create_app"]
