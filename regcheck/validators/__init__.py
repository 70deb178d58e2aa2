"""The individual registration-data checks.

Each module groups the checks for one kind of input:

- `identity`: email, password, phone number, date of birth (pure).
- `files`: extension, byte size and pixel dimensions of uploaded files.
- `malware`: a heuristic signature scan of file content.
- `reference`: country and language names, backed by a reference-data
  provider.
"""
from .files import (
    exceeds_maximum_dimensions,
    exceeds_maximum_size,
    has_minimum_dimensions,
    is_valid_custom_extension,
    is_valid_document,
    is_valid_image,
    meets_minimum_size,
)
from .identity import is_age_valid, is_valid_email, is_valid_password, is_valid_phone_number
from .malware import contains_malware, find_malware_signature
from .reference import is_valid_country, is_valid_language
