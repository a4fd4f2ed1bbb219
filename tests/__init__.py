# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the credit intake proxy:
# - test_proxy_service.py / test_routes.py: proxy envelopes and HTTP routes
# - test_error_classifier.py / test_transport.py: failure classification
# - test_iap.py: IAP assertion verification and identity routes
# - test_validation.py / test_intake_client.py: applicant-side forms
#
# The upstream is always faked with httpx.MockTransport.
# Run tests with: pytest
# =============================================================================
