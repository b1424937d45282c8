# tasks/tests/__init__.py
"""
Task App Test Suite
===================

This package contains unit and integration tests for the tasks application
and its AI engine.

Modules:
--------
- helpers: Fake AI provider and model factories shared by the suite
- test_engine: Unit tests for the decision logic (fallback scorer, oracle
  fallover, response parsing, prioritizer ordering)
- test_orchestration: Integration tests for the burnout pipeline, team
  aggregation, daily hours, prioritizer and Celery refresh
- test_api: HTTP tests for /api/v1/tasks/

Running Tests:
--------------
    # Run all task tests
    python manage.py test tasks

    # Run specific test module
    python manage.py test tasks.tests.test_engine
    python manage.py test tasks.tests.test_orchestration

    # Or through pytest-django from the repository root
    pytest backend/tasks
"""
