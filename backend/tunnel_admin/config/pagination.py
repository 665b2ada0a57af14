DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

def normalize_pagination(page_num_raw, page_size_raw):
    """Return (page_num, page_size) from raw pageNum/pageSize query values.

    pageNum is 1-based; pageSize is clamped to [1, MAX_PAGE_SIZE].
    """
    try:
        page_num = int(page_num_raw) if page_num_raw is not None else 1
        page_size = int(page_size_raw) if page_size_raw is not None else DEFAULT_PAGE_SIZE
    except ValueError:
        raise ValueError('pageNum/pageSize must be int')
    page_num = max(1, page_num)
    page_size = max(1, min(page_size, MAX_PAGE_SIZE))
    return page_num, page_size
