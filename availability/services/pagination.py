from typing import Any, Sequence


def envelope(data: list, *, total: int, limit: int, offset: int, **meta: Any) -> dict[str, Any]:
    return {'data': data, 'meta': {'total': total, 'limit': limit, 'offset': offset, **meta}}


def paginate(items: Sequence, *, limit: int, offset: int, **meta: Any) -> dict[str, Any]:
    """Slice an already computed list; ``total`` is always the full length."""
    return envelope(list(items[offset:offset + limit]), total=len(items), limit=limit, offset=offset, **meta)
