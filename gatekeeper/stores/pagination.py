"""Zero-based pagination shared by the list and search operations."""

from dataclasses import dataclass

DEFAULT_PAGE_SIZE = 100


@dataclass(frozen=True)
class PageRequest:
    """A normalized page request: ``offset = page * page_size``."""

    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return self.page * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size


def _to_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def page_request(
    page: object = 0,
    page_size: object = None,
    default_page_size: int = DEFAULT_PAGE_SIZE,
) -> PageRequest:
    """
    Normalize raw page parameters.

    A negative or malformed page becomes 0; a page size that is missing,
    malformed or not positive becomes the default.
    """
    page_num = _to_int(page)
    if page_num is None or page_num < 0:
        page_num = 0
    size = _to_int(page_size)
    if size is None or size <= 0:
        size = default_page_size
    return PageRequest(page=page_num, page_size=size)
