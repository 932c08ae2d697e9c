"""Shared test fixtures.

Requests never leave the process: a scripted stand-in for requests.Session
answers by method and path, and cookie files live in a temp directory.
"""

import time

import pytest
from requests.cookies import create_cookie

from doodle_client import Client, Config

BASE_URL = "https://doodle.com"


class FakeResponse:
	def __init__(self, status_code=200, text="", url=None, reason="OK"):
		self.status_code = status_code
		self.text = text
		self.url = url
		self.reason = reason


class FakeHttp:
	"""Answers requests from a table of (method, path) -> response or callable."""

	def __init__(self):
		self.cookies = None
		self.routes = {}
		self.calls = []

	def route(self, method, path, answer):
		self.routes[(method, path)] = answer

	def set_cookie(self, name, value, expires):
		self.cookies.set_cookie(
			create_cookie(name, value, domain="doodle.com", path="/", expires=expires)
		)

	def count(self, method, path):
		return len([c for c in self.calls if c["method"] == method and c["path"] == path])

	def request(self, method, url, **kwargs):
		path = url[len(BASE_URL):]
		self.calls.append(dict(kwargs, method=method, path=path, url=url))
		answer = self.routes.get((method, path))
		if answer is None:
			return FakeResponse(404, "<html><title>Doodle: Not found</title></html>", url, "Not Found")
		if callable(answer):
			answer = answer(self, method, url, kwargs)
		if answer.url is None:
			answer.url = url
		return answer


def login_succeeds(lifetime=3600):
	def answer(http, method, url, kwargs):
		http.set_cookie("DoodleAuthentication", "identity", int(time.time()) + lifetime)
		return FakeResponse(200, "<html></html>")
	return answer


@pytest.fixture
def config(tmp_path):
	c = Config()
	c.useragent = "test-agent"
	c.cookie_path = str(tmp_path)
	c.username = "me@example.com"
	c.password = "secret"
	return c


@pytest.fixture
def http():
	h = FakeHttp()
	h.route("GET", "/", FakeResponse(200, "<html></html>"))
	h.route("POST", "/np/mydoodle/logister", login_succeeds())
	return h


@pytest.fixture
def client(config, http):
	return Client.from_config(config, http=http)
