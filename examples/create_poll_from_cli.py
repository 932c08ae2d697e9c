#!/usr/bin/env python3
# Creates a poll from the command line and prints its public link.
#
#   create_poll_from_cli.py -c doodle.ini -t "Team lunch" -n "John Doe" \
#       --date 20160126:1200,1230-1330 --date 20160127
#   create_poll_from_cli.py -c doodle.ini --text -t "Pizza?" -n "John Doe" -o Margherita -o Diavola

import os
import sys

import doodle_client
from doodle_client import config as config_loader
from doodle_client import Client, PollSpec, PollType, DoodleError

def parse_date(value):
	day, _, times = value.partition(":")
	return day, [t for t in times.split(",") if t]

def main(config, args):
	from logging import info, error

	client = Client.from_config(config)
	try:
		client.connect()
		spec = PollSpec(
			title=args.title,
			name=args.name,
			email=args.email or config.username,
			type=PollType.TEXT if args.text else PollType.DATE,
			options=args.option,
			dates=dict(parse_date(d) for d in args.date),
			description=args.description,
			if_need_be=args.if_need_be,
		)
		poll = client.create_poll(spec)
	except (DoodleError, ValueError) as e:
		error("Could not create poll: {}".format(e))
		return 1

	info("Created poll {}".format(poll.id))
	print(poll.public_url)
	return 0

if __name__ == "__main__":
	import argparse
	parser = argparse.ArgumentParser(description="{}, {}".format(doodle_client.name, doodle_client.description))
	parser.add_argument("-c", "--config", dest="config_file", nargs=1, default=["doodle.ini"], help="use the specified config file")
	parser.add_argument("-t", "--title", required=True, help="poll title")
	parser.add_argument("-n", "--name", required=True, help="initiator name")
	parser.add_argument("-e", "--email", default=None, help="initiator e-mail, defaults to the account")
	parser.add_argument("-d", "--description", default="", help="poll description")
	parser.add_argument("--text", action="store_true", help="create a text poll instead of a date poll")
	parser.add_argument("-o", "--option", action="append", default=[], help="text option, may be repeated")
	parser.add_argument("--date", action="append", default=[], help="YYYYMMDD[:HHMM,HHMM-HHMM,...], may be repeated")
	parser.add_argument("--if-need-be", dest="if_need_be", action="store_true", help="allow if-need-be answers")
	parser.add_argument("-v", "--version", action="version", version="{} v{}".format(doodle_client.name, doodle_client.version))
	parser.add_argument("--debug", action="store_true", default=False)
	args = parser.parse_args()

	config_file = os.environ["DOODLE_CONFIG"] if "DOODLE_CONFIG" in os.environ else args.config_file[0]
	c = config_loader.from_file(config_file)
	if c is None:
		print("Cannot start without a valid configuration file")
		sys.exit(2)
	c.debug |= args.debug

	import logging
	logging.basicConfig(format="%(levelname)s | %(message)s", level=logging.DEBUG if c.debug else logging.INFO)
	logging.getLogger("requests").setLevel(logging.WARNING)
	logging.getLogger("urllib3").setLevel(logging.WARNING)

	err = config_loader.validate(c)
	if err:
		logging.error("Configuration state invalid: {}".format(err))
		sys.exit(2)

	sys.exit(main(c, args))
