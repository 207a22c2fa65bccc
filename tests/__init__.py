# authkit Test Suite
"""
Test suite including:
- Unit tests (encoding, crypto providers, OTP, cookies)
- Integration tests
- Security tests (tampering, malformed input)

Run with: pytest
Coverage: coverage run -m pytest && coverage report
"""
