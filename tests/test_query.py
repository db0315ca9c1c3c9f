"""Tests for perch.http.query: query parsing."""

import pytest

from perch.http.query import QueryParams, parse_query_string


class TestParseQueryString:
    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("/page??a=1&b=", {"a": "1", "b": ""}),
            ("/page?a=1&a=2", {"a": "1"}),
            ("/page?name=J%C3%BCrgen&q=a+b", {"name": "Jürgen", "q": "a b"}),
            ("/page?flag", {"flag": ""}),
            ("/page", {}),
            ("/page?", {}),
        ],
    )
    def test_parse(self, url: str, expected: dict[str, str]) -> None:
        assert dict(parse_query_string(url)) == expected

    def test_repeated_values_kept(self) -> None:
        query = parse_query_string("/list?t=a&t=b")
        assert query["t"] == "a"
        assert query.get_list("t") == ["a", "b"]

    def test_same_values_as_query_params(self) -> None:
        from_url = parse_query_string("/p?x=1&x=2&y=")
        from_scope = QueryParams(b"x=1&x=2&y=")
        assert dict(from_url) == dict(from_scope) == {"x": "1", "y": ""}
        assert from_url.get_list("x") == from_scope.get_list("x") == ["1", "2"]


class TestQueryParams:
    def test_first_value_wins(self) -> None:
        q = QueryParams(b"tag=python&tag=rust")
        assert q["tag"] == "python"
        assert q.get_list("tag") == ["python", "rust"]

    def test_leading_question_mark_dropped(self) -> None:
        q = QueryParams(b"?a=1&b=")
        assert dict(q) == {"a": "1", "b": ""}

    def test_missing_key(self) -> None:
        q = QueryParams(b"a=1")
        assert q.get("missing") is None
        assert q.get_list("missing") == []
        with pytest.raises(KeyError):
            q["missing"]

    def test_empty(self) -> None:
        q = QueryParams()
        assert len(q) == 0
        assert q.raw == b""
