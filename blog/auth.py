from __future__ import annotations

from typing import Protocol

from .entities import User

ADMIN_EMAIL = "haishublog@example.com"
ADMIN_PASSWORD = "password123"
FALLBACK_PASSWORD = "123456"


class Authenticator(Protocol):
	def verify(self, user: User, password: str) -> bool:
		...


class MockAuthenticator:
	"""Placeholder credential check for the prototype. Not secure.

	The admin account accepts ``ADMIN_PASSWORD``; every account, the admin
	included, accepts ``FALLBACK_PASSWORD``. Swap in a real implementation
	(hash comparison, external identity provider) behind ``verify``.
	"""

	def __init__(self, admin_email: str = ADMIN_EMAIL, admin_password: str = ADMIN_PASSWORD, fallback_password: str = FALLBACK_PASSWORD):
		self.admin_email = admin_email
		self.admin_password = admin_password
		self.fallback_password = fallback_password

	def verify(self, user: User, password: str) -> bool:
		if user.email.lower() == self.admin_email and password == self.admin_password:
			return True
		return password == self.fallback_password
