import re
import time
import uuid
from dataclasses import dataclass

REQUEST_ID_MAX_LENGTH = 64
_REQUEST_ID = re.compile(r'[A-Za-z0-9._:-]{1,%d}' % REQUEST_ID_MAX_LENGTH)


def _request_id(header):
    """Keep a caller-supplied X-Request-ID only if it is short and plain."""
    if header and _REQUEST_ID.fullmatch(header):
        return header
    return uuid.uuid4().hex


@dataclass(frozen=True)
class RequestContext:
    """Per-request metering state, built once at request entry."""
    request_id: str
    started_at: float
    request_size_bytes: int
    identity: object = None

    @classmethod
    def start(cls, request, identity=None):
        try:
            size = int(request.META.get('CONTENT_LENGTH') or 0)
        except ValueError:
            size = 0
        return cls(
            request_id=_request_id(request.META.get('HTTP_X_REQUEST_ID')),
            started_at=time.monotonic(),
            request_size_bytes=max(size, 0),
            identity=identity,
        )

    @property
    def is_metered(self):
        return self.identity is not None

    def elapsed_ms(self):
        return int((time.monotonic() - self.started_at) * 1000)
