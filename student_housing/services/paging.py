import math


def page_info(page: int, page_size: int, total: int, returned: int) -> dict[str, int]:
    """
    Pagination block shared by every paged response.

    ``returned`` is the number of rows actually on this page, which for radius
    searches can be lower than ``page_size`` even before the last page.
    """
    return {
        "page": page,
        "page_size": page_size,
        "total": total,
        "total_pages": math.ceil(total / page_size) if page_size else 0,
        "returned": returned,
    }
