"""Tests for cookie file loading and cookie stores."""

from httpdispatch.http.cookies import FileCookieStore, MemoryCookieStore, load_cookies_from_file

COOKIE_FILE = (
    "# Netscape HTTP Cookie File\n"
    ".example.com\tTRUE\t/\tFALSE\t4102444800\tsessionid\tabc123\n"
    "#HttpOnly_api.example.com\tFALSE\t/v1\tTRUE\t4102444800\ttoken\txyz\n"
    "broken line\n"
    "\n"
    "example.org\tFALSE\t/\tFALSE\t\ttemp\t1\n"
)


class TestLoadCookiesFromFile:
    """Test Netscape cookie file parsing."""

    def test_missing_file(self, tmp_path):
        assert load_cookies_from_file(str(tmp_path / "missing.txt")) == []

    def test_parses_entries(self, tmp_path):
        cookie_file = tmp_path / "cookies.txt"
        cookie_file.write_text(COOKIE_FILE)

        cookies = load_cookies_from_file(str(cookie_file))

        assert [c.name for c in cookies] == ["sessionid", "token", "temp"]
        session, token, temp = cookies
        assert session.domain == ".example.com"
        assert session.domain_initial_dot is True
        assert session.expires == 4102444800
        assert token.domain == "api.example.com"
        assert token.path == "/v1"
        assert token.secure is True
        assert temp.expires is None
        assert temp.discard is True


class TestMemoryCookieStore:
    """Test the in-memory store."""

    def test_set_and_get(self):
        store = MemoryCookieStore()
        store.set("https://example.com/login", "session=abc; Path=/")
        store.set("https://example.com/login", "theme=dark; Path=/")

        header = store.get("https://example.com/account")

        assert "session=abc" in header
        assert "theme=dark" in header

    def test_cookies_scoped_to_domain(self):
        store = MemoryCookieStore()
        store.set("https://example.com/", "session=abc; Path=/")
        assert store.get("https://other.com/") is None

    def test_clear(self):
        store = MemoryCookieStore()
        store.set("https://example.com/", "session=abc; Path=/")
        store.clear()
        assert store.get("https://example.com/") is None


class TestFileCookieStore:
    """Test the file-backed store."""

    def test_loads_existing_file(self, tmp_path):
        cookie_file = tmp_path / "cookies.txt"
        cookie_file.write_text(COOKIE_FILE)

        store = FileCookieStore(str(cookie_file))

        assert store.get("https://www.example.com/") == "sessionid=abc123"
        assert len(store.jar) == 3

    def test_set_persists(self, tmp_path):
        cookie_file = tmp_path / "nested" / "cookies.txt"
        store = FileCookieStore(str(cookie_file))

        store.set("https://example.com/", "session=abc; Path=/")

        assert cookie_file.exists()
        reloaded = FileCookieStore(str(cookie_file))
        assert reloaded.get("https://example.com/") == "session=abc"

    def test_clear_persists(self, tmp_path):
        cookie_file = tmp_path / "cookies.txt"
        store = FileCookieStore(str(cookie_file))
        store.set("https://example.com/", "session=abc; Path=/")

        store.clear()

        assert FileCookieStore(str(cookie_file)).get("https://example.com/") is None
