def _int_param(request, name, default):
    try:
        return int(request.query_params.get(name, default))
    except (TypeError, ValueError):
        return default


def paginate(request, qs, per_page=25, max_per_page=200):
    """Slice `qs` by ?page=&per_page=. Returns (page_qs, pagination dict)."""
    page = max(_int_param(request, 'page', 1), 1)
    per_page = min(max(_int_param(request, 'per_page', per_page), 1), max_per_page)
    total = qs.count()
    return qs[(page - 1) * per_page:page * per_page], {
        'page': page,
        'per_page': per_page,
        'total': total,
        'pages': (total + per_page - 1) // per_page,
    }
