"""
Sender ID format rules, shared by submission, single send, bulk send and OTP.
"""

import re
from enum import Enum

SENDER_ID_MIN_LENGTH = 3
SENDER_ID_MAX_LENGTH = 11

_ALPHANUMERIC = re.compile(r'[A-Za-z0-9]+', re.ASCII)


class SenderIdCheck(Enum):
    VALID = 'VALID'
    MISSING = 'MISSING'
    INVALID_FORMAT = 'INVALID_FORMAT'


def validate_sender_id(value):
    """
    Check a raw sender ID.

    Absent or empty is MISSING; a length outside 3-11 or any character
    outside ASCII letters and digits is INVALID_FORMAT.
    """
    if value is None or value == '':
        return SenderIdCheck.MISSING
    if not isinstance(value, str):
        return SenderIdCheck.INVALID_FORMAT
    if not SENDER_ID_MIN_LENGTH <= len(value) <= SENDER_ID_MAX_LENGTH:
        return SenderIdCheck.INVALID_FORMAT
    if not _ALPHANUMERIC.fullmatch(value):
        return SenderIdCheck.INVALID_FORMAT
    return SenderIdCheck.VALID
