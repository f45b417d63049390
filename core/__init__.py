# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the logic behind SkyCast:
# - models/: Pydantic schemas (weather payload, identity, search records)
# - services/: Weather proxy, session store, search recorder, history reader
# - controller.py: Client-side state machine composing the services
#
# Nothing here builds HTTP responses: the weather proxy raises the exception
# types from app/exceptions.py and the routers turn them into JSON.
# =============================================================================
