"""Services Layer — orchestrates codec, lifecycle and repository for the API and CLI.

Invariants:
    - Services depend on the CaptureLineRepository Protocol, never on SQLAlchemy
    - One service class per aggregate (capture lines)
"""
