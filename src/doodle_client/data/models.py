import enum

MAX_LENGTH_TITLE = 64
MAX_LENGTH_DESCRIPTION = 512

_date_format = "%a %d.%m.%Y %H:%M"

class PollType(enum.Enum):
	TEXT = "TEXT"
	DATE = "DATE"

class PollState(enum.Enum):
	OPEN = "OPEN"
	CLOSED = "CLOSED"

def str_to_polltype(string):
	if string is not None and string.strip().upper() == "TEXT":
		return PollType.TEXT
	return PollType.DATE

def _truncate(value, length):
	value = (value or "").strip()
	return value[:length]

class Option:
	"""
	A poll option: either a free-text label or a date (optionally a range), never both.
	"""
	def __init__(self, id=None, text=None, start=None, end=None, allday=False):
		if (text is None) == (start is None):
			raise ValueError("An option is either a text or a date")
		if end is not None and start is None:
			raise ValueError("An option end needs a start")
		self.id = id
		self.text = text
		self.start = start
		self.end = end
		self.allday = allday

	@classmethod
	def from_text(cls, text, id=None):
		return cls(id=id, text=text)

	@classmethod
	def from_dates(cls, start, end=None, allday=False, id=None):
		return cls(id=id, start=start, end=end, allday=allday)

	@property
	def is_date(self):
		return self.start is not None

	def __str__(self):
		if not self.is_date:
			return self.text
		out = self.start.strftime(_date_format)
		if self.end is not None and self.end.timestamp() > 0:
			out += " - " + self.end.strftime(_date_format)
		return out

	def __repr__(self):
		return "Option({!r}, {})".format(self.id, self)

class Preference:
	def __init__(self, option, value):
		self.option = option
		self.value = value

	def __str__(self):
		return self.value

class Participant:
	def __init__(self, id, name, avatar=None, preferences=None, user_behind_participant=None):
		self.id = id
		self.name = (name or "").strip()
		self.avatar = avatar
		self.preferences = preferences if preferences is not None else []
		self.user_behind_participant = user_behind_participant

	def __str__(self):
		return "Participant: {} (id={})".format(self.name, self.id)

class Location:
	def __init__(self, name, address=None, country=None):
		if not name:
			raise ValueError("A location needs a name")
		self.name = name.strip()
		self.address = address.strip() if address else None
		self.country = country.strip() if country else None

	def __str__(self):
		return self.name

class Poll:
	"""
	A poll as listed by the dashboard.

	description, options, participants and location come from the poll detail
	and are hydrated through the repository on first access, once per instance.
	A Poll built without a repository never touches the network: these fields
	then keep their empty defaults unless set explicitly.
	"""
	public_url_format = "https://doodle.com/poll/{id}"

	def __init__(self, id, repository=None):
		self.id = id
		self.type = None
		self._title = ""
		self.state = None
		self.admin_key = None
		self.multi_day = False
		self.row_constraint = False
		self.by_invitation = False
		self.invitees_count = 0
		self.participants_count = 0
		self.ask_address = False
		self.ask_email = False
		self.ask_phone = False
		self.am_i_notified = False
		self.last_write_access = None
		self._last_write_access_raw = None
		self.last_activity = None

		self._repository = repository
		self._detail = None
		self._description = None
		self._options = None
		self._participants = None
		self._location = None

	def __eq__(self, other):
		return isinstance(other, Poll) and self.id == other.id

	def __hash__(self):
		return hash(self.id)

	def __str__(self):
		return "Poll: {} (id={}, type={}, state={})".format(self.title, self.id, self.type, self.state)

	@property
	def title(self):
		return self._title

	@title.setter
	def title(self, value):
		self._title = _truncate(value, MAX_LENGTH_TITLE)

	@property
	def detail(self):
		"""The raw detail payload, or None if it was never fetched."""
		return self._detail

	@property
	def is_hydrated(self):
		return self._detail is not None

	def _ensure_hydrated(self):
		if self._detail is None and self._repository is not None:
			self._repository.hydrate(self)

	def _hydrate(self, detail, description, options, participants, location):
		# Values set by the caller before hydration win
		self._detail = detail
		if self._description is None:
			self._description = _truncate(description, MAX_LENGTH_DESCRIPTION)
		if self._options is None:
			self._options = options
		if self._participants is None:
			self._participants = participants
		if self._location is None:
			self._location = location

	# Lazy fields

	@property
	def description(self):
		if self._description is None:
			self._ensure_hydrated()
		return self._description or ""

	@description.setter
	def description(self, value):
		self._description = _truncate(value, MAX_LENGTH_DESCRIPTION)

	@property
	def options(self):
		if self._options is None:
			self._ensure_hydrated()
		return self._options or []

	@options.setter
	def options(self, value):
		self._options = list(value)

	@property
	def participants(self):
		if self._participants is None:
			self._ensure_hydrated()
		return self._participants or []

	@participants.setter
	def participants(self, value):
		self._participants = list(value)

	@property
	def location(self):
		if self._location is None:
			self._ensure_hydrated()
		return self._location

	@location.setter
	def location(self, value):
		self._location = value

	# Links

	@property
	def public_url(self):
		if self._detail and self._detail.get("prettyUrl"):
			return self._detail["prettyUrl"]
		return self.public_url_format.format(id=self.id)

	def _export_url(self, key):
		self._ensure_hydrated()
		if not self._detail or not self._detail.get(key):
			return ""
		url = self._detail[key]
		if self._repository is not None:
			return self._repository.absolute_url(url)
		return url

	@property
	def export_excel_url(self):
		return self._export_url("exportExcelUrl")

	@property
	def export_pdf_url(self):
		return self._export_url("exportPdfUrl")

	@property
	def export_print_url(self):
		return self._export_url("exportPrintUrl")
