"""Core components for regcheck.

This package contains the error taxonomy, the configuration manager, and
the `RegistrationDataChecker` service object that binds configuration to
the individual checks.
"""
