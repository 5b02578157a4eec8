"""
Cursor-based pagination over list calls.
"""

from typing import Any, Callable, Dict, Generic, Iterator, List, Optional, Tuple, TypeVar

from .rpc.base import Option, RpcOptions

T = TypeVar("T")
W = TypeVar("W")

Fetcher = Callable[[Dict[Option, Any]], Tuple[Optional[str], List[W]]]


class Page(Generic[T]):
    """One page of a list call plus the means to fetch the pages after it.

    The page keeps the option set it was fetched with. Fetching the next page
    re-issues the same call with ``PAGE_TOKEN`` replaced by this page's
    cursor. Nothing is cached: every page boundary is one remote call.
    """

    def __init__(self,
                 fetcher: Fetcher,
                 options: RpcOptions,
                 transform: Callable[[Any], T],
                 next_page_token: Optional[str],
                 values: List[T]):
        self._fetcher = fetcher
        self._options = dict(options)
        self._transform = transform
        self.next_page_token = next_page_token or None
        self.values = tuple(values)

    @classmethod
    def fetch(cls,
              fetcher: Fetcher,
              options: RpcOptions,
              transform: Callable[[Any], T]) -> "Page[T]":
        """Issue the call once and wrap the result."""
        options = dict(options)
        cursor, items = fetcher(options)
        return cls(fetcher, options, transform, cursor, [transform(item) for item in items or []])

    def has_next_page(self) -> bool:
        return self.next_page_token is not None

    def next_page(self) -> Optional["Page[T]"]:
        if not self.has_next_page():
            return None
        options = dict(self._options)
        options[Option.PAGE_TOKEN] = self.next_page_token
        return Page.fetch(self._fetcher, options, self._transform)

    def iterate_all(self) -> Iterator[T]:
        """Yield every item from this page onward, fetching pages on demand.

        An empty page that still carries a cursor does not end the walk.
        """
        page: Optional[Page[T]] = self
        while page is not None:
            yield from page.values
            page = page.next_page()

    def __iter__(self) -> Iterator[T]:
        return self.iterate_all()

    def __repr__(self) -> str:
        return f"Page(values={len(self.values)}, next_page_token={self.next_page_token!r})"
