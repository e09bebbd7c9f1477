"""
Application layer - Use cases and business logic orchestration.

This layer contains:
- IntakeService (validate submission, claim slot, create application, brand slot)
- ReviewService (listings, occupancy, status transitions, roster audit)

No direct dependencies on frameworks (FastAPI, etc.)
"""
