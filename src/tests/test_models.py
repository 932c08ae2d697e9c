from datetime import datetime, timezone

import pytest

from doodle_client.data.models import Option, Location, Participant, Poll, PollType, str_to_polltype


def test_option_is_text_or_date():
	with pytest.raises(ValueError):
		Option()
	with pytest.raises(ValueError):
		Option(text="A", start=datetime(2016, 1, 26, tzinfo=timezone.utc))
	assert not Option.from_text("A").is_date
	assert Option.from_dates(datetime(2016, 1, 26, tzinfo=timezone.utc)).is_date


def test_option_labels():
	start = datetime(2016, 1, 26, 20, 0, tzinfo=timezone.utc)
	end = datetime(2016, 1, 26, 22, 0, tzinfo=timezone.utc)
	assert str(Option.from_text("Pizza")) == "Pizza"
	assert str(Option.from_dates(start)) == "Tue 26.01.2016 20:00"
	assert str(Option.from_dates(start, end)) == "Tue 26.01.2016 20:00 - Tue 26.01.2016 22:00"
	assert str(Option.from_dates(start, datetime(1970, 1, 1, tzinfo=timezone.utc))) == "Tue 26.01.2016 20:00"


def test_poll_title_and_description_are_bounded():
	poll = Poll("x")
	poll.title = "  " + "t" * 80
	poll.description = "d" * 600 + "  "
	assert poll.title == "t" * 64
	assert poll.description == "d" * 512


def test_location_needs_name():
	with pytest.raises(ValueError):
		Location("")
	location = Location(" Office ", address=" Street ")
	assert (str(location), location.address, location.country) == ("Office", "Street", None)


def test_participant_defaults():
	p = Participant("p1", " Ann ")
	assert p.name == "Ann"
	assert p.preferences == []


def test_str_to_polltype():
	assert str_to_polltype("text") == PollType.TEXT
	assert str_to_polltype("DATE") == PollType.DATE
	assert str_to_polltype(None) == PollType.DATE
