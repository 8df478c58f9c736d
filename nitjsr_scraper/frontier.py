import logging
from collections import deque
from typing import Callable, Deque, Optional, Set, Tuple

from .utils.url_rules import is_in_domain_and_visitable, normalize_url

module_logger = logging.getLogger(__name__)


class CrawlFrontier:
    """
    FIFO queue of pending (url, depth) pairs plus the visited set.

    `pop` hands out URLs in insertion order, so the same seeds and the same
    pages always produce the same traversal. A URL is marked visited the moment
    it is popped, whether or not its fetch later succeeds.
    """

    def __init__(
        self,
        max_pages: int,
        max_depth: int,
        url_filter: Callable[[str], bool] = is_in_domain_and_visitable,
    ):
        self.max_pages = max_pages
        self.max_depth = max_depth
        self.url_filter = url_filter
        self.visited: Set[str] = set()
        self._queue: Deque[Tuple[str, int]] = deque()
        self._pending: Set[str] = set()

    def __len__(self) -> int:
        return len(self._queue)

    @property
    def is_full(self) -> bool:
        return len(self.visited) >= self.max_pages

    @property
    def is_exhausted(self) -> bool:
        return self.is_full or not self._queue

    def push(self, url: str, depth: int) -> bool:
        url = normalize_url(url)
        if depth > self.max_depth or url in self.visited or url in self._pending:
            return False
        if not self.url_filter(url):
            module_logger.debug("Rejected URL for frontier", extra={"event_type": "frontier_rejected", "url": url})
            return False
        self._queue.append((url, depth))
        self._pending.add(url)
        return True

    def pop(self) -> Optional[Tuple[str, int]]:
        while self._queue and not self.is_full:
            url, depth = self._queue.popleft()
            self._pending.discard(url)
            if url in self.visited or depth > self.max_depth:
                continue
            self.visited.add(url)
            return url, depth
        return None

    def mark_visited(self, url: str) -> bool:
        """
        Record a URL reached another way (e.g. a redirect target).
        Returns False when it was already visited.
        """
        url = normalize_url(url)
        if url in self.visited:
            return False
        self._pending.discard(url)
        # visited never grows past max_pages
        if not self.is_full:
            self.visited.add(url)
        return True
