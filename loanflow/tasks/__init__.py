"""Background task entrypoints.

The HTTP API emits jobs through this package so that it never hard-requires
a running broker: emission is off unless ``CELERY_ENABLED`` is set.
"""
