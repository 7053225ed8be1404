"""
drf-spectacular preprocessing hooks.
"""


def preprocess_exclude_admin(endpoints, **kwargs):
    """Keep admin-only and internal endpoints out of the public API docs."""
    filtered = []
    for (path, path_regex, method, callback) in endpoints:
        if path.startswith('/api/admin/') or path.startswith('/admin/'):
            continue
        if path in ('/health/',):
            continue
        # Admin review of sender IDs
        if path.endswith('/status') and path.startswith('/api/sender-ids/'):
            continue
        filtered.append((path, path_regex, method, callback))
    return filtered
