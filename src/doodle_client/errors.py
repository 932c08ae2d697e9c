class DoodleError(Exception):
	pass

class AuthenticationError(DoodleError):
	"""Credentials were rejected, or the identity cookie needed for the token is missing."""
	pass

class TransportError(DoodleError):
	def __init__(self, message, method=None, url=None, status=None):
		super().__init__(message)
		self.method = method
		self.url = url
		self.status = status
	
	def __str__(self):
		msg = super().__str__()
		if self.method is None:
			return msg
		return "{} ({} {}, status={})".format(msg, self.method, self.url, self.status)

class MalformedResponseError(DoodleError):
	pass

class PollCreationError(DoodleError):
	def __init__(self, message, response=None):
		super().__init__(message)
		self.response = response

class PreconditionError(DoodleError):
	pass
