"""Infrastructure Layer — database sessions, repositories, logging.

Invariants:
    - Only this layer (and api/) touches SQLAlchemy sessions
    - Repositories translate ORM rows to core CaptureLineRecord values
"""
