from logging import debug, warning, error
from datetime import datetime, timezone

import dateutil.parser
from bs4 import BeautifulSoup

from ..data.models import Poll, PollType, PollState, Option, Participant, Preference, Location
from ..config import resolve_zone
from ..errors import MalformedResponseError, PollCreationError

REQUIRED_FIELDS = (
	"id", "type", "title", "state", "multiDay", "byInvitation",
	"inviteesCount", "participantsCount", "askAddress", "askEmail", "askPhone",
	"amINotified", "lastWriteAccess",
)

def decode_html(html):
	"""
	Turns an HTML fragment into plain text, line breaks included.
	"""
	if not html:
		return ""
	soup = BeautifulSoup(html, "html.parser")
	for br in soup.find_all("br"):
		br.replace_with("\n")
	return soup.get_text()

def _parse_enum(enum_type, value, poll_id):
	try:
		return enum_type(value)
	except ValueError as e:
		error("Poll {} has unknown {} {}".format(poll_id, enum_type.__name__, value))
		raise MalformedResponseError("Poll {} has unknown {} {}".format(poll_id, enum_type.__name__, value)) from e

class PollRepository:
	"""
	Maps service payloads to Polls and resolves their detail-backed fields.
	"""
	def __init__(self, client):
		self.client = client

	@property
	def zone(self):
		return resolve_zone(self.client.config.timezone)

	def absolute_url(self, url):
		if url.startswith("http://") or url.startswith("https://"):
			return url
		return self.client.config.base_url + url

	# Listing

	def create(self, data):
		"""
		Creates a Poll from a dashboard entry.
		:param data: One entry of the poll list
		:return: The Poll, bound to this repository
		"""
		missing = [f for f in REQUIRED_FIELDS if f not in data or data[f] is None]
		if missing:
			error("Poll entry is missing {}".format(", ".join(missing)))
			raise MalformedResponseError("Poll entry {} is missing fields: {}".format(data.get("id"), ", ".join(missing)))

		poll = Poll(data["id"], repository=self)
		poll.type = _parse_enum(PollType, data["type"], data["id"])
		poll.title = data["title"]
		poll.state = _parse_enum(PollState, data["state"], data["id"])
		poll.multi_day = bool(data["multiDay"])
		poll.by_invitation = bool(data["byInvitation"])
		poll.ask_address = bool(data["askAddress"])
		poll.ask_email = bool(data["askEmail"])
		poll.ask_phone = bool(data["askPhone"])
		poll.am_i_notified = bool(data["amINotified"])
		try:
			poll.invitees_count = int(data["inviteesCount"])
			poll.participants_count = int(data["participantsCount"])
			poll.last_write_access = dateutil.parser.parse(data["lastWriteAccess"])
			poll._last_write_access_raw = data["lastWriteAccess"]
		except (ValueError, TypeError, OverflowError) as e:
			raise MalformedResponseError("Poll entry {} has invalid values: {}".format(data["id"], e)) from e

		try:
			poll.last_activity = dateutil.parser.parse(data["lastActivity"])
		except (KeyError, ValueError, TypeError, OverflowError):
			warning("Unreadable last activity of poll {}, using now".format(data["id"]))
			poll.last_activity = datetime.now(timezone.utc)

		# Optional, possibly missing
		if data.get("adminKey"):
			poll.admin_key = data["adminKey"]
		if data.get("rowConstraint"):
			poll.row_constraint = bool(data["rowConstraint"])

		return poll

	def create_all(self, entries):
		polls = [self.create(entry) for entry in entries or []]
		debug("Mapped {} polls".format(len(polls)))
		return polls

	@staticmethod
	def dump(poll):
		"""
		Serializes the listed fields of a Poll back to the dashboard entry format.
		"""
		data = {
			"id": poll.id,
			"type": poll.type.value,
			"title": poll.title,
			"state": poll.state.value,
			"multiDay": poll.multi_day,
			"byInvitation": poll.by_invitation,
			"inviteesCount": poll.invitees_count,
			"participantsCount": poll.participants_count,
			"askAddress": poll.ask_address,
			"askEmail": poll.ask_email,
			"askPhone": poll.ask_phone,
			"amINotified": poll.am_i_notified,
			"lastWriteAccess": poll._last_write_access_raw or poll.last_write_access.isoformat(),
		}
		if poll.admin_key:
			data["adminKey"] = poll.admin_key
		return data

	# Creation

	def build_create_request(self, spec):
		config = self.client.config
		return spec.to_payload(config.locale, config.timezone)

	def parse_create_response(self, data):
		if not isinstance(data, dict) or not data.get("id"):
			error("Poll creation answered without an id")
			raise PollCreationError("Poll creation failed: {}".format(data), response=data)

		poll = Poll(data["id"], repository=self)
		poll.title = data.get("title", "")
		poll.state = _parse_enum(PollState, data.get("state", PollState.OPEN.value), data["id"])
		poll.by_invitation = bool(data.get("byInvitation", False))
		if data.get("type"):
			poll.type = _parse_enum(PollType, data["type"], data["id"])
		if data.get("adminKey"):
			poll.admin_key = data["adminKey"]
		return poll

	# Detail

	def hydrate(self, poll):
		"""
		Fetches the detail of a poll, once, and fills its description, options,
		participants and location from it.
		:param poll: The poll to hydrate
		:return: The same poll
		"""
		if poll.is_hydrated:
			return poll
		detail = self.client.get_info(poll)
		if poll.type is None and detail.get("type"):
			poll.type = _parse_enum(PollType, detail["type"], poll.id)

		description = self.map_description(detail)
		options = self.map_options(poll, detail)
		participants = self.map_participants(detail, options)
		location = self.map_location(detail)
		poll._hydrate(detail, description, options, participants, location)
		return poll

	def map_description(self, detail):
		if detail.get("description") is not None:
			return detail["description"]
		return decode_html(detail.get("descriptionHTML"))

	def map_options(self, poll, detail):
		if "options" in detail:
			return [self._map_option(poll, o) for o in detail["options"] or []]
		# Legacy detail only carries the labels
		options = []
		for text in detail.get("optionsText") or []:
			if poll.type == PollType.DATE:
				try:
					options.append(Option.from_dates(dateutil.parser.parse(text).replace(tzinfo=self.zone)))
				except (ValueError, OverflowError) as e:
					raise MalformedResponseError("Invalid date option {}".format(text)) from e
			else:
				options.append(Option.from_text(text))
		return options

	def _map_option(self, poll, data):
		if "text" in data and data["text"] is not None:
			return Option.from_text(data["text"], id=data.get("id"))
		if data.get("start") is None:
			raise MalformedResponseError("Option of poll {} has neither text nor start".format(poll.id))
		start = self._from_millis(data["start"])
		end = self._from_millis(data["end"]) if data.get("end") else None
		return Option.from_dates(start, end=end, allday=bool(data.get("allday")), id=data.get("id"))

	def _from_millis(self, value):
		return datetime.fromtimestamp(int(value) / 1000, tz=self.zone)

	def map_participants(self, detail, options):
		participants = []
		for data in detail.get("participants") or []:
			if "id" not in data:
				raise MalformedResponseError("Participant without id")
			values = data.get("preferences") or []
			if len(values) < len(options):
				raise MalformedResponseError("Participant {} has {} preferences for {} options".format(data["id"], len(values), len(options)))
			preferences = [Preference(option, str(value)) for option, value in zip(options, values)]
			participants.append(Participant(
				data["id"], data.get("name", ""),
				avatar=data.get("avatarLargeUrl") or data.get("avatar") or None,
				preferences=preferences,
				user_behind_participant=data.get("userBehindParticipant")))
		return participants

	def map_location(self, detail):
		data = detail.get("location")
		if not data:
			return None
		if not data.get("name"):
			raise MalformedResponseError("Location without name")
		return Location(data["name"], address=data.get("address"), country=data.get("countryCode") or data.get("country"))
