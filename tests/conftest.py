import json

import pytest
import requests

from core.storage import ItemStore


def listing_body(items, token=None):
    """Build a listing response: preamble, blank line, JSON."""
    doc = [["getitemsresponse", ["page", items, None, None, token]]]
    return ")]}'\n\n" + json.dumps(doc)


def raw_record(external_id, **fields):
    """A 31-slot positional record as the listing endpoint returns it."""
    raw = [None] * 31
    raw[0] = external_id
    raw[1] = fields.get("title", f"Item {external_id}")
    raw[6] = fields.get("description", "")
    raw[9] = fields.get("category", "ext/games")
    raw[10] = fields.get("category_name", "Games")
    raw[12] = fields.get("rating", 4.5)
    raw[22] = fields.get("user_ratings", 10)
    raw[23] = fields.get("downloads", "1,000")
    raw[30] = fields.get("pricing", "free")
    return raw


def make_response(status=200, text=""):
    resp = requests.Response()
    resp.status_code = status
    resp._content = text.encode("utf-8")
    resp.encoding = "utf-8"
    resp.reason = "OK" if status < 400 else "Bad Request"
    resp.url = "https://chrome.google.com/webstore/ajax/item"
    return resp


class FakeSession:
    """Replays queued responses (or raises queued exceptions) in order."""

    def __init__(self, get=None, post=None):
        self._get = list(get or [])
        self._post = list(post or [])
        self.get_calls = []
        self.post_calls = []

    @staticmethod
    def _next(queue):
        result = queue.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    def get(self, url, **kwargs):
        self.get_calls.append((url, kwargs))
        return self._next(self._get)

    def post(self, url, data=None, **kwargs):
        self.post_calls.append((url, data, kwargs))
        return self._next(self._post)


@pytest.fixture
def store(tmp_path):
    s = ItemStore(db_path=str(tmp_path / "items.sqlite3"))
    s.ensure_db()
    return s
