from logging import debug, info, error

from bs4 import BeautifulSoup

from .config import Config
from .data.cookies import CredentialStore
from .data.poll_spec import PollSpec
from .errors import AuthenticationError, MalformedResponseError, PreconditionError
from .services import Transport
from .services.polls import PollRepository
from .services.session import SessionManager

_api_polls = "/api/v2.0/polls"

class Client:
	"""
	Client for Doodle (https://doodle.com).

	Typical use:

		client = Client("me@example.com", "secret")
		client.connect()
		for poll in client.get_personal_polls():
			print(poll.title, [str(o) for o in poll.options])
	"""
	def __init__(self, username, password, config=None, http=None):
		"""
		:param username: The account e-mail address
		:param password: The account password
		:param config: Optional Config, locale, timezone, useragent and cookie path default to Config()
		:param http: Optional requests.Session-like object used to send requests
		"""
		self.config = config if config is not None else Config()
		self.store = CredentialStore(self.config.cookie_path, username, password, self.config.useragent)
		self.transport = Transport(self.config, self.store, http=http)
		self.session = SessionManager(username, password, self.transport, self.store)
		self.repository = PollRepository(self)

	@classmethod
	def from_config(cls, config, http=None):
		return cls(config.username, config.password, config=config, http=http)

	# Session

	def connect(self):
		"""
		Connects to Doodle, reusing the persisted session if it is still valid.
		:return: The active token
		"""
		return self.session.ensure_authenticated(prefetch=True)

	def disconnect(self):
		"""
		Drops the persisted session.
		:return: True if persisted credentials were removed
		"""
		return self.session.invalidate()

	def get_user_info(self):
		data = {
			"isMobile": False,
			"includeKalsysInfos": False,
		}
		return self.transport.get_json("/np/users/me", data)

	# Polls

	def get_personal_polls(self):
		"""
		Returns the polls created by the account.
		:return: A list of Polls
		"""
		polls = self._get_dashboard("myPolls")
		return self.repository.create_all((polls.get("myPolls") or {}).get("myPolls"))

	def get_other_polls(self):
		"""
		Returns the polls the account took part in.
		:return: A list of Polls
		"""
		polls = self._get_dashboard("otherPolls")
		return self.repository.create_all((polls.get("otherPolls") or {}).get("otherPolls"))

	def _get_dashboard(self, name):
		data = {
			"fullList": True,
			"locale": self.config.locale,
		}
		response = self.transport.get("/np/users/me/dashboard/" + name, data)
		if response.text.lstrip().startswith("<"):
			soup = BeautifulSoup(response.text, "html.parser")
			title = soup.title.get_text().strip() if soup.title else ""
			if title.startswith("Doodle: Not found"):
				error("Dashboard refused the token")
				raise AuthenticationError("Doodle returned an error while fetching polls. "
					"Either you are not authenticated or your token is outdated.")
		polls = self.transport.decode(response, "GET")
		if not isinstance(polls, dict):
			raise MalformedResponseError("Dashboard {} is not an object".format(name))
		return polls

	def create_poll(self, spec=None, **kwargs):
		"""
		Creates a poll.
		:param spec: A PollSpec, or None to build one from kwargs
		:return: The new Poll, with its admin key
		"""
		if spec is None:
			spec = PollSpec(**kwargs)
		payload = self.repository.build_create_request(spec)
		info("Creating poll \"{}\"".format(payload["title"]))
		response = self.transport.post_json(_api_polls, payload)
		return self.repository.parse_create_response(response)

	def delete_poll(self, poll):
		"""
		Deletes a poll, which requires its admin key.
		:param poll: The Poll to delete
		:return: True once deleted
		"""
		if not poll.admin_key:
			raise PreconditionError("Admin key not available. Poll {} cannot be deleted.".format(poll.id))
		info("Deleting poll {}".format(poll.id))
		return self.transport.delete("{}/{}".format(_api_polls, poll.id), params={"adminKey": poll.admin_key})

	def delete_participant(self, poll, participant_id):
		"""
		Removes a participant from a poll, which requires its admin key.
		:param poll: The Poll
		:param participant_id: ID of the participant to remove
		:return: True once deleted
		"""
		if not poll.admin_key:
			raise PreconditionError("Admin key not available. Participants of poll {} cannot be deleted.".format(poll.id))
		info("Deleting participant {} of poll {}".format(participant_id, poll.id))
		path = "{}/{}/participants/{}".format(_api_polls, poll.id, participant_id)
		return self.transport.delete(path, params={"adminKey": poll.admin_key})

	def get_info(self, poll):
		"""
		Fetches the raw detail of a poll.
		:param poll: The Poll
		:return: The detail payload as a dict
		"""
		debug("Fetching detail of poll {}".format(poll.id))
		data = {
			"adminKey": poll.admin_key or "",
			"locale": self.config.locale,
		}
		detail = self.transport.get_json("{}/{}".format(_api_polls, poll.id), params=data)
		if isinstance(detail, dict) and isinstance(detail.get("poll"), dict):
			detail = detail["poll"]
		if not isinstance(detail, dict):
			raise MalformedResponseError("Detail of poll {} is not an object".format(poll.id))
		return detail

	def load(self, poll):
		"""
		Hydrates the detail-backed fields of a poll explicitly.
		"""
		return self.repository.hydrate(poll)
