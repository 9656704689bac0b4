"""API routers, mounted under settings.API_PREFIX."""
