# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the KANVA API:
# - fakes.py: In-memory Supabase used by every store-backed test
# - test_models.py: Unit tests for Pydantic model validation
# - test_team_slots.py / test_credits.py: Quota, cooldown and ledger rules
# - test_api.py: Integration tests for API endpoints
#
# Run tests with: pytest
# =============================================================================
