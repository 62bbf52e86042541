"""Pagination: page math for task listings and paragraph paging of descriptions.

Invariants:
    - Listing pages are 1-based; page < 1 or page_size < 1 is a ValidationError
    - Description paging clamps bad inputs instead of failing (page -> 1,
      page_size -> default), but a page past the end is NotFound
    - Paragraphs are separated by a blank line ("\\n\\n")
"""

from dataclasses import dataclass

from reward_tracker.core.errors import ResourceNotFoundError, ValidationError

PARAGRAPH_SEPARATOR = "\n\n"


@dataclass(frozen=True)
class DescriptionPage:
    description: str
    current_page: int
    total_pages: int
    page_size: int


def check_page_request(page: int, page_size: int) -> None:
    if page < 1:
        raise ValidationError("page must be at least 1", field="page")
    if page_size < 1:
        raise ValidationError("page size must be at least 1", field="page_size")


def total_pages(total_items: int, page_size: int) -> int:
    return (total_items + page_size - 1) // page_size


def page_offset(page: int, page_size: int) -> int:
    return (page - 1) * page_size


def paginate_description(
    description: str, page: int, page_size: int, default_page_size: int,
) -> DescriptionPage:
    """Slice a description into paragraph pages and return the requested one."""
    if not description:
        raise ResourceNotFoundError("Description", "empty")
    if page < 1:
        page = 1
    if page_size < 1:
        page_size = default_page_size

    paragraphs = description.split(PARAGRAPH_SEPARATOR)
    pages = total_pages(len(paragraphs), page_size)
    if page > pages:
        raise ResourceNotFoundError("Description page", str(page))

    start = page_offset(page, page_size)
    return DescriptionPage(
        description=PARAGRAPH_SEPARATOR.join(paragraphs[start:start + page_size]),
        current_page=page,
        total_pages=pages,
        page_size=page_size,
    )
