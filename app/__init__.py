# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# This package contains the weather proxy web application:
# - main.py: App factory, middleware setup, error handlers, entry point
# - config.py: Environment variable loading and settings
# - exceptions.py: Proxy error taxonomy and JSON error handlers
# - routers/: API endpoint definitions organized by feature
#
# The app layer is thin - it handles HTTP concerns and delegates
# business logic to the core/ package.
# =============================================================================
