from __future__ import annotations

import pytest

from post_scraper.crawler.state import CrawlPosition, CrawlState, ErrorKind, debounce


@pytest.mark.parametrize("kind", list(ErrorKind))
def test_first_occurrence_is_recorded(kind: ErrorKind) -> None:
    assert debounce(None, kind) == (kind, False)


@pytest.mark.parametrize("kind", list(ErrorKind))
def test_immediate_repeat_stops_and_clears(kind: ErrorKind) -> None:
    memo, stop = debounce(kind, kind)
    assert stop is True
    assert memo is None


@pytest.mark.parametrize("first", list(ErrorKind))
@pytest.mark.parametrize("second", list(ErrorKind))
def test_different_kind_replaces_memo(first: ErrorKind, second: ErrorKind) -> None:
    if first is second:
        pytest.skip("same kind")
    assert debounce(first, second) == (second, False)


def test_page_advance_resets_index_and_content() -> None:
    state = CrawlState(position=CrawlPosition(page=2, post_index=5), content="<html></html>")
    advanced = state.advance_page()
    assert advanced.position == CrawlPosition(page=3, post_index=0)
    assert advanced.content is None
    # original state is untouched
    assert state.position.page == 2


def test_resolve_only_clears_matching_kind() -> None:
    state = CrawlState(memo=ErrorKind.RECORD_EXISTS)
    assert state.resolve(ErrorKind.FETCH_FAILURE).memo is ErrorKind.RECORD_EXISTS
    assert state.resolve(ErrorKind.RECORD_EXISTS).memo is None


def test_post_advance_clears_memo() -> None:
    state = CrawlState(memo=ErrorKind.PERSIST_FAILURE, content="x")
    advanced = state.advance_post()
    assert advanced.memo is None
    assert advanced.position == CrawlPosition(page=1, post_index=1)
    assert advanced.content == "x"
