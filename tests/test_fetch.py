import requests
from requests.structures import CaseInsensitiveDict

from logocatalog.assets.fetch import (
    build_candidates,
    build_session,
    fetch_candidate,
    is_svg_response,
    resolve_asset,
)

SVG_BODY = b'<?xml version="1.0"?>\n<svg xmlns="http://www.w3.org/2000/svg"></svg>'


class FakeResponse:
    def __init__(self, status_code: int, content: bytes = b"", content_type: str | None = None) -> None:
        self.status_code = status_code
        self.content = content
        self.headers = CaseInsensitiveDict()
        if content_type:
            self.headers["Content-Type"] = content_type

    @property
    def ok(self) -> bool:
        return self.status_code < 400


class FakeSession:
    """Answers by candidate label; labels not listed get a 404."""

    def __init__(self, responses: dict) -> None:
        self.responses = responses
        self.calls: list[str] = []

    def get(self, url, timeout=None, allow_redirects=True):
        self.calls.append(url)
        label = url.split("?")[0].rsplit("/", 1)[-1]
        response = self.responses.get(label, FakeResponse(404))
        if isinstance(response, Exception):
            raise response
        return response


def test_candidates_in_priority_order():
    candidates = build_candidates("carrefour.com", "tok", "cdn.example.test")
    assert [c.label for c in candidates] == ["symbol.svg", "logo.svg", "symbol", "logo"]
    assert candidates[0].url == (
        "https://cdn.example.test/carrefour.com/theme/dark/fallback/404/symbol.svg?c=tok"
    )
    assert all(c.url.endswith("?c=tok") for c in candidates)


def test_identifier_is_encoded_as_one_segment():
    candidate = build_candidates("a/b c", "tok", "cdn.example.test")[0]
    assert "/a%2Fb%20c/theme/" in candidate.url


def test_svg_header_wins_over_body():
    assert is_svg_response("image/svg+xml", b"\x89PNG not svg")


def test_svg_sniffed_without_header():
    assert is_svg_response(None, SVG_BODY)
    assert is_svg_response("application/octet-stream", b"<SVG viewBox='0 0 1 1'/>")
    assert not is_svg_response(None, b"\x89PNG\r\n")
    assert not is_svg_response("image/png", b"")


def test_fetch_candidate_reports_failures_without_raising():
    candidate = build_candidates("x.com", "tok")[0]

    result = fetch_candidate(FakeSession({}), candidate)
    assert not result.success
    assert result.status_code == 404
    assert result.content is None

    session = FakeSession({"symbol.svg": requests.exceptions.ConnectionError("boom")})
    result = fetch_candidate(session, candidate)
    assert not result.success
    assert result.status_code == 0
    assert "ConnectionError" in result.message

    session = FakeSession({"symbol.svg": requests.exceptions.ReadTimeout("slow")})
    assert fetch_candidate(session, candidate).message == "request timed out"


def test_stops_at_first_success(tmp_path):
    session = FakeSession({"symbol": FakeResponse(200, b"\x89PNG data", "image/png"), "logo": FakeResponse(200, SVG_BODY)})
    download = resolve_asset("carrefour.com", session, tmp_path, client_id="tok")

    assert download is not None
    assert download.candidate.label == "symbol"
    assert len(session.calls) == 3
    assert not any(call.split("?")[0].endswith("/logo") for call in session.calls)
    assert [p.name for p in tmp_path.iterdir()] == ["carrefour.png"]
    assert download.path.read_bytes() == b"\x89PNG data"


def test_svg_first_candidate(tmp_path):
    session = FakeSession({"symbol.svg": FakeResponse(200, SVG_BODY, "image/svg+xml")})
    download = resolve_asset("Carrefour.com", session, tmp_path, client_id="tok")
    assert download.path == tmp_path / "carrefour.svg"
    assert download.result.is_svg
    assert len(session.calls) == 1


def test_write_failure_moves_to_next_candidate(tmp_path):
    # a directory squatting on the svg name makes the first write fail
    (tmp_path / "shop.svg").mkdir()
    session = FakeSession(
        {
            "symbol.svg": FakeResponse(200, SVG_BODY, "image/svg+xml"),
            "logo.svg": FakeResponse(200, SVG_BODY, "image/svg+xml"),
            "symbol": FakeResponse(200, b"RIFFxxxxWEBP", "image/webp"),
        }
    )
    download = resolve_asset("shop", session, tmp_path, client_id="tok")
    assert download.candidate.label == "symbol"
    assert download.path == tmp_path / "shop.webp"
    assert len(session.calls) == 3


def test_no_variant_found(tmp_path):
    session = FakeSession({"logo": FakeResponse(500)})
    assert resolve_asset("nothing.com", session, tmp_path, client_id="tok") is None
    assert len(session.calls) == 4
    assert list(tmp_path.iterdir()) == []


def test_build_session_sets_user_agent():
    session = build_session("TestAgent/1.0", max_retries=0)
    assert session.headers["User-Agent"] == "TestAgent/1.0"
    assert session.get_adapter("https://cdn.example.test").max_retries.total == 0


def test_redirect_status_is_not_a_download(tmp_path):
    session = FakeSession(
        {
            "symbol.svg": FakeResponse(302, b"<html>moved</html>", "text/html"),
            "logo.svg": FakeResponse(200, SVG_BODY, "image/svg+xml"),
        }
    )
    download = resolve_asset("shop.com", session, tmp_path, client_id="tok")
    assert download.candidate.label == "logo.svg"
    assert len(session.calls) == 2

    result = fetch_candidate(FakeSession({"symbol.svg": FakeResponse(304)}), build_candidates("x.com", "tok")[0])
    assert not result.success
    assert result.status_code == 304
