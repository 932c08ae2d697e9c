from logging import debug, info, error
from threading import Lock
from time import time
import enum
import secrets
import string

from ..data.cookies import copy_cookie
from ..errors import AuthenticationError, TransportError

IDENTITY_COOKIE = "DoodleAuthentication"
TOKEN_COOKIE = "token"
TOKEN_LENGTH = 30
_token_charset = string.ascii_uppercase + string.ascii_lowercase + string.digits

_login_path = "/np/mydoodle/logister"

class SessionState(enum.Enum):
	UNAUTHENTICATED = 0
	AUTHENTICATING = 1
	AUTHENTICATED = 2

def generate_token(length=TOKEN_LENGTH):
	return "".join(secrets.choice(_token_charset) for _ in range(length))

class SessionManager:
	"""
	Owns the login flow and the token used by every authenticated call.

	The token is not issued by the server. After a successful login the client
	makes up a random alphanumeric string and stores it as a "token" cookie that
	inherits the expiry of the DoodleAuthentication identity cookie set by the
	server, mirroring what the service's own web front end does. If the server
	stops setting that cookie, no token can be derived and login fails.

	At most one login runs at a time; callers arriving during a login wait for it
	and reuse its token.
	"""
	def __init__(self, username, password, transport, store, clock=time):
		self.username = username
		self.password = password
		self.transport = transport
		self.store = store
		self.clock = clock
		self._lock = Lock()
		self._authenticating = False
		transport.bind_session(self)

	@property
	def account_id(self):
		return self.username

	@property
	def token(self):
		return self.store.get_valid_value(TOKEN_COOKIE, now=self.clock())

	@property
	def token_expiry(self):
		cookie = self.store.get(TOKEN_COOKIE)
		return cookie.expires if cookie is not None else None

	@property
	def state(self):
		if self._authenticating:
			return SessionState.AUTHENTICATING
		if self.token is not None:
			return SessionState.AUTHENTICATED
		return SessionState.UNAUTHENTICATED

	def get_active_token(self):
		token = self.token
		if token is not None:
			return token
		return self.ensure_authenticated()

	def ensure_authenticated(self, prefetch=False):
		"""
		Returns a valid token, logging in first if there is none.
		:param prefetch: If True, load the landing page first even when a token is cached
		:return: The active token
		"""
		with self._lock:
			if prefetch:
				self._get_landing_page()
			token = self.token
			if token is not None:
				debug("Reusing token of {}".format(self.username))
				return token

			self._authenticating = True
			try:
				if not prefetch:
					self._get_landing_page()
				token = self.token
				if token is not None:
					return token
				self._login()
				return self._derive_token()
			finally:
				self._authenticating = False

	def invalidate(self):
		"""
		Drops the persisted session. The next authenticated call logs in again.
		:return: True if persisted credentials were removed
		"""
		with self._lock:
			return self.store.delete()

	def _get_landing_page(self):
		# Sets the cookies the login form expects
		self.transport.get("/", authenticated=False)

	def _login(self):
		info("Logging in as {}".format(self.username))
		data = {
			"eMailAddress": self.username,
			"password": self.password,
			"locale": self.transport.config.locale,
			"timeZone": self.transport.config.timezone,
		}
		try:
			self.transport.post(_login_path, data, authenticated=False)
		except TransportError as e:
			if e.status in (401, 403):
				error("Login rejected for {}".format(self.username))
				raise AuthenticationError("Credentials rejected for {}".format(self.username)) from e
			raise

	def _derive_token(self):
		identity = self.store.get(IDENTITY_COOKIE)
		if identity is None:
			error("Login did not set the {} cookie".format(IDENTITY_COOKIE))
			raise AuthenticationError("Login failed for {}, no identity cookie was set".format(self.username))
		if identity.expires is None or identity.expires <= self.clock():
			error("The {} cookie has no usable expiry".format(IDENTITY_COOKIE))
			raise AuthenticationError("Login failed for {}, identity cookie has no usable expiry".format(self.username))

		token = generate_token()
		self.store.set(copy_cookie(identity, TOKEN_COOKIE, token))
		info("Authenticated as {}".format(self.username))
		return token
