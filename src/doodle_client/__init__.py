# Metadata
name = "doodle-client"
description = "Doodle polling service client"
version = "0.1.0"

from .client import Client
from .config import Config
from .data.models import Poll, PollType, PollState, Option, Participant, Preference, Location
from .data.poll_spec import PollSpec
from .errors import (DoodleError, AuthenticationError, TransportError, MalformedResponseError,
	PollCreationError, PreconditionError)
