"""
Tests for the event roster service

- test_*_repository.py: slot and application stores on SQLite
- test_intake_service.py, test_concurrent_intake.py: submission workflow and slot races
- test_review_service.py: admin listings, status changes, roster audit
- api/: HTTP endpoints through the ASGI app
"""
