"""
Domain layer - Business logic and domain models.

This layer contains:
- Value objects (roles, statuses, encoded profile images)
- Domain entities (Slot, Application) and domain errors

No dependencies on infrastructure or frameworks.
"""
