def fetch_all(query, batch_size=100):
    """Every record matched by a Protean queryset, read page by page.

    A queryset evaluates a single page by default; this walks the pages until
    the reported total is reached.
    """
    items = []
    offset = 0
    while True:
        result = query.offset(offset).limit(batch_size).all()
        items.extend(result.items)
        offset += batch_size
        if offset >= result.total or not result.items:
            return items
