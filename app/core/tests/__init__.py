"""
Tests for the core app.

Test modules:
    - test_soft_delete.py: SoftDeleteMixin and SoftDeleteQuerySet
    - test_services.py: ServiceResult and BaseService helpers
    - test_exception_handler.py: Error taxonomy and API error bodies
    - test_views.py: Health check endpoint
"""
