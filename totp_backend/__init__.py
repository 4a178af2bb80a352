"""
Flask backend for TOTP enrolment and verification.
Integrates with the totp_core functions and the totp_database store.
"""

from .app import create_app

__all__ = ['create_app']
