# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the SkyCast proxy and client:
# - test_weather_proxy.py: GET /api/weather and health endpoints
# - test_session_store.py: Credential validation and auth flows
# - test_search_history.py: Recording and reading search history
# - test_controller.py: Application controller state machine
# - test_models.py: Pydantic model validation and display helpers
#
# Run tests with: pytest
# =============================================================================
