from logging import debug, error
from time import perf_counter, sleep
from threading import Lock
import json

import requests

from ..errors import TransportError, MalformedResponseError

JSON_API_PREFIX = "/api/"
TOKEN_HEADER = "Access-Token"

def is_json_endpoint(path):
	return path.startswith(JSON_API_PREFIX)

def encode_form(data, prefix=None):
	"""
	Flattens a mapping into form fields.
	Lists use the empty-bracket notation (key[]=value), never indexed brackets,
	nested mappings use key[sub]=value and booleans become "true"/"false".
	:param data: The mapping to encode
	:param prefix: Name of the enclosing field, if any
	:return: A list of (name, value) pairs
	"""
	pairs = []
	for key, value in data.items():
		name = key if prefix is None else "{}[{}]".format(prefix, key)
		if isinstance(value, dict):
			pairs.extend(encode_form(value, prefix=name))
		elif isinstance(value, (list, tuple)):
			for item in value:
				pairs.append((name + "[]", _form_value(item)))
		elif value is not None:
			pairs.append((name, _form_value(value)))
	return pairs

def _form_value(value):
	if isinstance(value, bool):
		return "true" if value else "false"
	return str(value)

def decode_json(text):
	"""
	Decodes a JSON response body, dropping the one-character sentinel some
	endpoints put in front of the document.
	:param text: The response body
	:return: The decoded document
	"""
	if text and text[0] not in "{[":
		text = text[1:]
	return json.loads(text)

class Transport:
	"""
	Sends requests to the service, carrying the session token and cookies.
	Paths under /api/ are JSON endpoints taking the token in a header; every
	other path is a legacy form endpoint taking the token as a parameter.
	"""
	def __init__(self, config, store, http=None):
		self.config = config
		self.store = store
		self.session = None
		self.http = http if http is not None else requests.Session()
		self.http.cookies = store.jar
		self._last_time = 0
		self._rate_lock = Lock()

	def bind_session(self, session):
		self.session = session

	def url_for(self, path):
		return self.config.base_url + path

	def _wait_for_rate_limit(self):
		wait_length = self.config.ratelimit
		if not wait_length:
			return
		with self._rate_lock:
			diff = perf_counter() - self._last_time
			if diff < wait_length:
				sleep(wait_length - diff)
			self._last_time = perf_counter()

	def request(self, method, path, payload=None, params=None, authenticated=True):
		"""
		Sends a request to the service.
		:param method: GET, POST or DELETE
		:param path: Path relative to the service base URL
		:param payload: Request body, JSON-encoded for JSON endpoints and form-encoded otherwise.
			For legacy GET requests it is sent as the query string.
		:param params: Extra query parameters
		:param authenticated: If True, attach the active session token
		:return: The requests response, with a 2xx status
		"""
		url = self.url_for(path)
		json_api = is_json_endpoint(path)
		headers = {"User-Agent": self.config.useragent}
		params = dict(params or {})
		payload = dict(payload) if payload is not None else None

		if authenticated:
			if self.session is None:
				raise TransportError("No session bound to transport", method, url)
			token = self.session.get_active_token()
			if json_api:
				headers[TOKEN_HEADER] = token
			elif method == "GET" or payload is None:
				params["token"] = token
			else:
				payload["token"] = token

		kwargs = {}
		if json_api:
			headers["Accept"] = "application/json"
			if payload is not None:
				kwargs["json"] = payload
		elif payload is not None:
			if method == "GET":
				params.update(payload)
			else:
				kwargs["data"] = encode_form(payload)
		if params:
			kwargs["params"] = encode_form(params)

		self._wait_for_rate_limit()
		debug("Sending request")
		debug("  {} {}".format(method, url))
		try:
			response = self.http.request(method, url, headers=headers, timeout=self.config.timeout,
				allow_redirects=True, **kwargs)
		except requests.exceptions.Timeout as e:
			error("  Response timed out")
			raise TransportError("Request timed out", method, url) from e
		except requests.exceptions.RequestException as e:
			error("  Request failed: {}".format(e))
			raise TransportError("Request failed: {}".format(e), method, url) from e
		finally:
			self.store.save()

		debug("  Status code: {}".format(response.status_code))
		if not 200 <= response.status_code < 300:
			error("Response {}: {}".format(response.status_code, response.reason))
			raise TransportError("Unexpected response {}".format(response.reason), method, url, response.status_code)
		return response

	def get(self, path, payload=None, **kwargs):
		return self.request("GET", path, payload, **kwargs)

	def post(self, path, payload, **kwargs):
		return self.request("POST", path, payload, **kwargs)

	def delete(self, path, params=None, **kwargs):
		"""
		Deletes a resource. Success is signalled by a 200 status only, the body is ignored.
		"""
		response = self.request("DELETE", path, params=params, **kwargs)
		if response.status_code != 200:
			error("Delete of {} answered {}".format(path, response.status_code))
			raise TransportError("Delete not acknowledged", "DELETE", self.url_for(path), response.status_code)
		return True

	def get_json(self, path, payload=None, **kwargs):
		response = self.get(path, payload, **kwargs)
		return self.decode(response, "GET")

	def post_json(self, path, payload, **kwargs):
		response = self.post(path, payload, **kwargs)
		return self.decode(response, "POST")

	def decode(self, response, method):
		try:
			return decode_json(response.text)
		except ValueError as e:
			error("Response is not JSON", exc_info=e)
			raise MalformedResponseError("Response to {} {} is not JSON".format(method, response.url)) from e
