"""
Phone number and message helpers for the upstream provider.
"""

import re

_STRIP = re.compile(r'[\s\-().]')
_E164 = re.compile(r'^\+[1-9]\d{9,14}$')
_GH_LOCAL = re.compile(r'^0[2-9]\d{8}$')
_GH_INTL = re.compile(r'^233[2-9]\d{8}$')

GSM_SEGMENT_LENGTH = 160
UNICODE_SEGMENT_LENGTH = 70


def format_phone_number(phone):
    """Normalize to E.164; Ghanaian local numbers (0XXXXXXXXX) become +233XXXXXXXXX."""
    cleaned = _STRIP.sub('', str(phone or ''))
    if not cleaned:
        return cleaned
    if _GH_LOCAL.match(cleaned):
        return '+233' + cleaned[1:]
    if _GH_INTL.match(cleaned):
        return '+' + cleaned
    if cleaned.startswith('+'):
        return cleaned
    return '+' + cleaned


def validate_phone_number(phone):
    return bool(_E164.match(phone or ''))


def is_unicode(message):
    return any(ord(ch) > 0x7F for ch in message)


def calculate_sms_segments(message):
    if not message:
        return 1
    per_segment = UNICODE_SEGMENT_LENGTH if is_unicode(message) else GSM_SEGMENT_LENGTH
    return -(-len(message) // per_segment)
