from datetime import datetime, timezone, timedelta

import pytest

from doodle_client.data.models import Location, PollType
from doodle_client.data.poll_spec import PollSpec, to_java_timestamp


def _ms(*args, tzinfo=timezone.utc):
	return int(datetime(*args, tzinfo=tzinfo).timestamp()) * 1000


def test_date_without_time_is_all_day_and_order_is_kept():
	spec = PollSpec("Lunch", "John Doe", "john@example.com", dates={"20150929": [], "20150930": ["0830"]})
	options = spec.to_payload("en_GB", "UTC")["options"]
	assert options == [
		{"allday": True, "start": _ms(2015, 9, 29), "end": None},
		{"allday": False, "start": _ms(2015, 9, 30, 8, 30), "end": None},
	]


def test_insertion_order_wins_over_date_order():
	spec = PollSpec("Lunch", "John", "", dates={"20151002": [], "20151001": []})
	starts = [o["start"] for o in spec.to_payload("en_GB", "UTC")["options"]]
	assert starts == [_ms(2015, 10, 2), _ms(2015, 10, 1)]


def test_time_range():
	spec = PollSpec("Lunch", "John", "", dates={"20150929": ["0830", "1400-1530"]})
	options = spec.to_payload("en_GB", "UTC")["options"]
	assert options[1] == {"allday": False, "start": _ms(2015, 9, 29, 14, 0), "end": _ms(2015, 9, 29, 15, 30)}


def test_times_follow_the_timezone():
	spec = PollSpec("Lunch", "John", "", dates={"20150929": ["0830"]})
	payload = spec.to_payload("de_CH", "Europe/Zurich")
	assert payload["options"][0]["start"] == _ms(2015, 9, 29, 8, 30, tzinfo=timezone(timedelta(hours=2)))
	assert payload["initiator"]["timeZone"] == "Europe/Zurich"
	assert payload["timeZone"] is True


def test_java_timestamp_has_zero_milliseconds():
	dt = datetime(2015, 9, 29, 8, 30, 12, 999000, tzinfo=timezone.utc)
	assert to_java_timestamp(dt) % 1000 == 0
	assert to_java_timestamp(dt) == _ms(2015, 9, 29, 8, 30, 12)


def test_text_options_are_trimmed():
	spec = PollSpec(" Pizza? ", " John ", "john@example.com", type="text", options=[" Margherita ", "", "Diavola"])
	payload = spec.to_payload("en_GB", "UTC")
	assert payload["type"] == "TEXT"
	assert payload["title"] == "Pizza?"
	assert payload["initiator"] == {"name": "John", "email": "john@example.com", "notify": True, "timeZone": "UTC"}
	assert payload["options"] == [{"text": "Margherita"}, {"text": "Diavola"}]
	assert payload["timeZone"] is False


def test_optional_flags_and_location():
	spec = PollSpec(
		"Lunch", "John", "", type=PollType.TEXT, options=["A"],
		if_need_be=True, hidden=True, ask_email=True,
		location=Location("Office", address="Main Street 1", country="CH"),
	)
	payload = spec.to_payload("en_GB", "UTC")
	assert payload["preferencesType"] == "YESNOIFNEEDBE"
	assert payload["hidden"] is True
	assert payload["askEmail"] is True
	assert payload["askPhone"] is False
	assert payload["location"] == {"name": "Office", "address": "Main Street 1", "countryCode": "CH"}


@pytest.mark.parametrize("kwargs", [
	dict(title=" ", name="John", email=""),
	dict(title="T", name="", email=""),
	dict(title="T", name="John", email="", type=PollType.TEXT, options=[" "]),
	dict(title="T", name="John", email="", dates={}),
	dict(title="T", name="John", email="", dates={"2015-09-29": []}),
	dict(title="T", name="John", email="", dates={"20150231": []}),
	dict(title="T", name="John", email="", dates={"20150929": ["8:30"]}),
	dict(title="T", name="John", email="", dates={"20150929": ["2460"]}),
	dict(title="T", name="John", email="", dates={"20150929": ["1400-1300"]}),
])
def test_invalid_specs(kwargs):
	with pytest.raises(ValueError):
		PollSpec(**kwargs).to_payload("en_GB", "UTC")


def test_unknown_timezone_is_not_sent_as_utc():
	spec = PollSpec("Lunch", "Ann", "ann@example.com", dates={"20150929": []})
	with pytest.raises(ValueError):
		spec.to_payload("en_GB", "Mars/Olympus")
