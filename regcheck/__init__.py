"""regcheck: validation checks for user-registration data.

This package provides isolated yes/no checks for the fields and files a
registration form typically collects: email, password, phone number,
date of birth, uploaded images and documents, and country or language
names backed by a public reference dataset.
"""

__version__ = "0.1.0"
__license__ = "MIT"

__all__ = ["__version__", "__license__"]
