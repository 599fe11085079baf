import math
from dataclasses import dataclass
from typing import Generic, List, Optional, Sequence, Tuple, TypeVar

from sqlalchemy import func
from sqlmodel import Session, select

from storefront.configuration.settings import Configuration

configuration = Configuration()

T = TypeVar("T")

# Pages either side of the current one shown in page links
PAGE_WINDOW = 2


@dataclass
class Page(Generic[T]):
    """One 0-based page of a query result."""

    items: List[T]
    page: int
    size: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.size) if self.size else 0

    @property
    def has_previous(self) -> bool:
        return self.page > 0

    @property
    def has_next(self) -> bool:
        return self.page + 1 < self.total_pages

    @property
    def start_page(self) -> int:
        return max(0, self.page - PAGE_WINDOW)

    @property
    def end_page(self) -> int:
        return max(0, min(self.total_pages - 1, self.page + PAGE_WINDOW))


def normalize_paging(page: Optional[int], size: Optional[int], default_size: int) -> Tuple[int, int]:
    page = max(0, page or 0)
    size = size or default_size
    size = min(max(1, size), configuration.max_page_size)
    return page, size


def resolve_sort(model, sort_by: Optional[str], sort_dir: Optional[str], allowed: Sequence[str], default: str):
    field = sort_by if sort_by in allowed else default
    column = getattr(model, field)
    if (sort_dir or "").lower() == "desc":
        return column.desc(), field, "desc"
    return column.asc(), field, "asc"


def paginate(session: Session, statement, page: int, size: int) -> Page:
    """Runs `statement` for one page and counts the full result."""
    count_statement = select(func.count()).select_from(statement.order_by(None).subquery())
    total = session.exec(count_statement).one()
    items = session.exec(statement.offset(page * size).limit(size)).all()
    return Page(items=list(items), page=page, size=size, total=total)
