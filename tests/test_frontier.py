from nitjsr_scraper.frontier import CrawlFrontier


def test_pop_is_fifo():
    frontier = CrawlFrontier(max_pages=10, max_depth=2)
    for path in ("/a", "/b", "/c"):
        frontier.push(f"https://nitjsr.ac.in{path}", 0)

    order = [frontier.pop()[0] for _ in range(3)]

    assert order == ["https://nitjsr.ac.in/a", "https://nitjsr.ac.in/b", "https://nitjsr.ac.in/c"]
    assert frontier.pop() is None


def test_push_rejects_duplicates_visited_and_too_deep():
    frontier = CrawlFrontier(max_pages=10, max_depth=1)

    assert frontier.push("https://nitjsr.ac.in/a", 0)
    assert not frontier.push("https://nitjsr.ac.in/a#section", 1)  # already pending
    assert not frontier.push("https://nitjsr.ac.in/deep", 2)
    assert not frontier.push("https://www.google.com/", 0)

    frontier.pop()
    assert not frontier.push("https://nitjsr.ac.in/a", 1)  # already visited
    assert len(frontier) == 0


def test_visited_never_exceeds_max_pages():
    frontier = CrawlFrontier(max_pages=2, max_depth=3)
    for i in range(5):
        frontier.push(f"https://nitjsr.ac.in/page/{i}", 0)

    popped = []
    while (entry := frontier.pop()) is not None:
        popped.append(entry)

    assert len(popped) == 2
    assert len(frontier.visited) == 2
    assert frontier.is_full and frontier.is_exhausted


def test_depth_zero_allows_only_seeds():
    frontier = CrawlFrontier(max_pages=5, max_depth=0)
    assert frontier.push("https://nitjsr.ac.in/", 0)
    assert not frontier.push("https://nitjsr.ac.in/About", 1)
    assert frontier.pop() == ("https://nitjsr.ac.in/", 0)
    assert frontier.pop() is None


def test_mark_visited_reports_repeats():
    frontier = CrawlFrontier(max_pages=5, max_depth=1)
    frontier.push("https://nitjsr.ac.in/old", 0)
    frontier.pop()

    assert frontier.mark_visited("https://nitjsr.ac.in/new")
    assert not frontier.mark_visited("https://nitjsr.ac.in/new")
    assert not frontier.mark_visited("https://nitjsr.ac.in/old")
    assert not frontier.push("https://nitjsr.ac.in/new", 1)


def test_custom_url_filter():
    frontier = CrawlFrontier(max_pages=5, max_depth=1, url_filter=lambda url: url.endswith("/ok"))
    assert frontier.push("https://anywhere.test/ok", 0)
    assert not frontier.push("https://nitjsr.ac.in/no", 0)
