import configparser
import os
import platform
import tempfile
from logging import warning, error

from dateutil import tz

DEFAULT_BASE_URL = "https://doodle.com"
DEFAULT_LOCALE = "en_GB"
DEFAULT_TIMEZONE = "UTC"

class WhitespaceFriendlyConfigParser(configparser.ConfigParser):
	def get(self, section, option, *args, **kwargs):
		val = super().get(section, option, *args, **kwargs)
		return val.strip('"') if isinstance(val, str) else val

def resolve_zone(name):
	"""
	Looks up a timezone by name.
	:param name: An IANA name such as Europe/Zurich, or UTC
	:return: The tzinfo
	"""
	zone = tz.gettz(name) if name else None
	if zone is None:
		raise ValueError("Unknown timezone {}".format(name))
	return zone

def default_useragent():
	u = platform.uname()
	return "Mozilla/5.0 ({} {} {}) Doodle Python Client".format(u.system, u.release, u.machine)

class Config:
	def __init__(self):
		self.debug = False
		self.username = None
		self.password = None

		self.useragent = default_useragent()
		self.timeout = 10.0
		self.ratelimit = 0.0

		self.base_url = DEFAULT_BASE_URL
		self.locale = DEFAULT_LOCALE
		self.timezone = DEFAULT_TIMEZONE
		self.cookie_path = tempfile.gettempdir()

def from_file(file_path):
	if not os.path.splitext(file_path)[1]:
		file_path += ".ini"

	parsed = WhitespaceFriendlyConfigParser()
	success = parsed.read(file_path, encoding="utf-8")
	if len(success) == 0:
		error("Failed to load config file {}".format(file_path))
		return None

	config = Config()

	if "account" in parsed:
		sec = parsed["account"]
		config.username = sec.get("username", None)
		config.password = sec.get("password", None)

	if "connection" in parsed:
		sec = parsed["connection"]
		config.useragent = sec.get("useragent", config.useragent)
		config.timeout = sec.getfloat("timeout", config.timeout)
		config.ratelimit = sec.getfloat("ratelimit", config.ratelimit)

	if "doodle" in parsed:
		sec = parsed["doodle"]
		config.base_url = sec.get("base_url", config.base_url).rstrip("/")
		config.locale = sec.get("locale", config.locale)
		config.timezone = sec.get("timezone", config.timezone)
		config.cookie_path = sec.get("cookie_path", config.cookie_path)

	if "options" in parsed:
		sec = parsed["options"]
		config.debug = sec.getboolean("debug", False)

	return config

def validate(config):
	def is_bad_str(s):
		return s is None or len(s) == 0

	if is_bad_str(config.username):
		return "username missing"
	if is_bad_str(config.password):
		return "password missing"
	if is_bad_str(config.useragent):
		return "useragent missing"
	if is_bad_str(config.base_url):
		return "base url missing"
	if is_bad_str(config.cookie_path):
		return "cookie path missing"
	if is_bad_str(config.timezone) or tz.gettz(config.timezone) is None:
		return "unknown timezone {}".format(config.timezone)
	if config.ratelimit < 0:
		warning("Rate limit can't be negative, defaulting to 0")
		config.ratelimit = 0.0
	if config.timeout <= 0:
		return "timeout must be positive"
	return False
