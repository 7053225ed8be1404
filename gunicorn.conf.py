import multiprocessing
import os
from pathlib import Path

_BASE_DIR = Path(__file__).resolve().parent

bind = os.getenv('GUNICORN_BIND', '0.0.0.0:8000')

# Sync workers: each SMS send blocks on the provider for up to ARKESEL_TIMEOUT
# seconds, usage writes are handed to Celery.
workers = int(os.getenv('GUNICORN_WORKERS', multiprocessing.cpu_count() * 2 + 1))
worker_class = 'sync'

# Must stay above ARKESEL_TIMEOUT or a slow provider call kills the worker
# after the wallet reservation but before the refund.
timeout = int(os.getenv('GUNICORN_TIMEOUT', int(os.getenv('ARKESEL_TIMEOUT', '30')) + 15))
graceful_timeout = 30
keepalive = 5

max_requests = int(os.getenv('GUNICORN_MAX_REQUESTS', '2000'))
max_requests_jitter = 100

# '-' logs to stdout/stderr; set GUNICORN_LOG_DIR on VMs without a log collector
_log_dir = os.getenv('GUNICORN_LOG_DIR')
if _log_dir:
    Path(_log_dir).mkdir(parents=True, exist_ok=True)
    errorlog = str(Path(_log_dir) / 'gunicorn_error.log')
    accesslog = str(Path(_log_dir) / 'gunicorn_access.log')
else:
    errorlog = '-'
    accesslog = '-'
loglevel = os.getenv('GUNICORN_LOG_LEVEL', 'info')
# Includes X-Request-ID so access lines can be joined with usage records
access_log_format = '%(h)s %(t)s "%(r)s" %(s)s %(b)s %(M)sms "%({x-request-id}i)s" "%(a)s"'

proc_name = 'mas3ndi'
pidfile = os.getenv('GUNICORN_PIDFILE') or None
