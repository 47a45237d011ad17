"""
Password validators plugged into ``AUTH_PASSWORD_VALIDATORS``.
"""
from __future__ import annotations

import hashlib
import logging
import re

import requests
from django.conf import settings
from django.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

PWNED_RANGE_URL = 'https://api.pwnedpasswords.com/range/{prefix}'


class ComplexityPasswordValidator:
    """Require letters in both cases, at least one digit and one symbol."""

    RULES = (
        (r'[a-z]', 'password_no_lower', 'The password must contain at least one lowercase letter.'),
        (r'[A-Z]', 'password_no_upper', 'The password must contain at least one uppercase letter.'),
        (r'\d', 'password_no_number', 'The password must contain at least one number.'),
        (r'[^A-Za-z0-9]', 'password_no_symbol', 'The password must contain at least one symbol.'),
    )

    def validate(self, password, user=None):
        errors = [
            ValidationError(message, code=code)
            for pattern, code, message in self.RULES
            if not re.search(pattern, password or '')
        ]
        if errors:
            raise ValidationError(errors)

    def get_help_text(self):
        return 'Your password must mix upper and lower case letters, numbers and symbols.'


class PwnedPasswordValidator:
    """Reject passwords that appear in the Have I Been Pwned corpus.

    Only the first five characters of the SHA-1 digest leave the process
    (k-anonymity range query).  Network failures never block a password
    change; they are logged and the password is accepted.
    """

    def validate(self, password, user=None):
        if not getattr(settings, 'PASSWORD_PWNED_CHECK', False):
            return
        if pwned_count(password) > 0:
            raise ValidationError(
                'The given password has appeared in a data leak. Please choose a different password.',
                code='password_compromised',
            )

    def get_help_text(self):
        return 'Your password must not appear in a known data breach.'


def pwned_count(password: str) -> int:
    digest = hashlib.sha1(password.encode('utf-8')).hexdigest().upper()
    prefix, suffix = digest[:5], digest[5:]
    try:
        resp = requests.get(
            PWNED_RANGE_URL.format(prefix=prefix),
            headers={'Add-Padding': 'true'},
            timeout=getattr(settings, 'PASSWORD_PWNED_TIMEOUT', 3),
        )
        resp.raise_for_status()
    except requests.RequestException as exc:
        logger.warning('Pwned password lookup failed: %s', exc)
        return 0
    for line in resp.text.splitlines():
        candidate, _, count = line.partition(':')
        if candidate.strip() == suffix:
            try:
                return int(count.strip())
            except ValueError:
                return 0
    return 0
