from logging import debug, info
from http.cookiejar import MozillaCookieJar, Cookie
from hashlib import sha1
from pathlib import Path
from threading import RLock
from time import time
import os

def cookie_file_name(username, password, useragent):
	"""
	Derives the cookie file name for an account. Stable for a given identity
	and client signature, so consecutive runs reuse the same session.
	"""
	key = "\0".join((username or "", password or "", useragent or ""))
	return sha1(key.encode("utf-8")).hexdigest()

def copy_cookie(template, name, value):
	"""
	Returns a new cookie carrying name and value, with the domain, path,
	secure flag and expiry of template.
	"""
	return Cookie(
		version=0, name=name, value=value,
		port=None, port_specified=False,
		domain=template.domain, domain_specified=template.domain_specified,
		domain_initial_dot=template.domain_initial_dot,
		path=template.path, path_specified=template.path_specified,
		secure=template.secure, expires=template.expires,
		discard=False, comment=None, comment_url=None, rest={})

class CredentialStore:
	"""
	Persisted cookie set of one account, in the Netscape cookie-file format.
	The jar is shared with the HTTP session so cookies rotated by the server
	land here too.
	"""
	def __init__(self, directory, username, password, useragent):
		self.path = Path(directory) / cookie_file_name(username, password, useragent)
		self.jar = MozillaCookieJar(str(self.path))
		self._lock = RLock()
		self.load()

	def load(self):
		with self._lock:
			self.jar.clear()
			if self.path.exists():
				debug("Loading cookies from {}".format(self.path))
				self.jar.load(ignore_discard=True, ignore_expires=True)

	def save(self):
		with self._lock:
			self.path.parent.mkdir(parents=True, exist_ok=True)
			self.jar.save(ignore_discard=True, ignore_expires=True)

	def delete(self):
		"""
		Removes the persisted cookies.
		:return: True if a cookie file was removed
		"""
		with self._lock:
			self.jar.clear()
			if not self.path.exists():
				return False
			os.remove(str(self.path))
			info("Removed cookie file {}".format(self.path))
			return True

	def get(self, name):
		with self._lock:
			for cookie in self.jar:
				if cookie.name == name:
					return cookie
		return None

	def set(self, cookie):
		with self._lock:
			self.jar.set_cookie(cookie)
			self.save()

	def get_valid_value(self, name, now=None):
		"""
		Returns the value of a cookie if it exists and has not expired.
		:param name: The cookie name
		:param now: Reference time in epoch seconds, defaults to the current time
		:return: The cookie value, otherwise None
		"""
		cookie = self.get(name)
		if cookie is None or cookie.expires is None:
			return None
		if now is None:
			now = time()
		if cookie.expires <= now:
			return None
		return cookie.value

	def cookies(self):
		"""
		:return: A dict of cookie names to their domain, path, secure flag, expiry and value
		"""
		with self._lock:
			return {
				c.name: {
					"domain": c.domain,
					"path": c.path,
					"secure": c.secure,
					"expires": c.expires,
					"value": c.value,
				}
				for c in self.jar
			}
