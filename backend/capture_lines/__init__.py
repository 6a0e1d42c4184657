"""Capture Lines Package — issuance and validation of bank capture line codes.

Invariants:
    - Package root has no import side-effects (only the version constant)
"""

__version__ = "1.0.0"
