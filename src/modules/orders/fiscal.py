"""NF-e fiscal field validation.

The NF-e access key ("chave de acesso") has 44 digits; the last one is a
Modulo-11 check digit over the first 43.  Weights 2..9 are applied starting
from the rightmost payload digit and cycle back to 2 after 9.

Both validators are total: malformed input yields ``False``, never an
exception.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Optional

from django.core.exceptions import ValidationError
from django.core.validators import URLValidator

from modules.orders.constants import NFE_ACCESS_KEY_LENGTH

WEIGHTS = (2, 3, 4, 5, 6, 7, 8, 9)
PAYLOAD_LENGTH = NFE_ACCESS_KEY_LENGTH - 1

_ACCESS_KEY_RE = re.compile(r"[0-9]{%d}" % NFE_ACCESS_KEY_LENGTH)
_PAYLOAD_RE = re.compile(r"[0-9]{%d}" % PAYLOAD_LENGTH)

_url_validator = URLValidator(schemes=["http", "https", "ftp", "ftps"])


def nfe_check_digit(payload: str) -> int:
    """Compute the Modulo-11 check digit for a 43-digit payload.

    Raises:
        ValueError: ``payload`` is not exactly 43 ASCII digits.
    """
    if not isinstance(payload, str) or not _PAYLOAD_RE.fullmatch(payload):
        raise ValueError(f"NF-e payload must be exactly {PAYLOAD_LENGTH} digits.")

    total = sum(
        int(digit) * WEIGHTS[(PAYLOAD_LENGTH - 1 - index) % len(WEIGHTS)]
        for index, digit in enumerate(payload)
    )
    remainder = total % 11
    return 0 if remainder < 2 else 11 - remainder


def validate_nfe_access_key(key: Any) -> bool:
    """Return ``True`` iff ``key`` is 44 digits with a valid check digit."""
    if not isinstance(key, str) or not _ACCESS_KEY_RE.fullmatch(key):
        return False
    return int(key[-1]) == nfe_check_digit(key[:PAYLOAD_LENGTH])


def validate_nfe_url(url: Any) -> bool:
    if not isinstance(url, str) or not url:
        return False
    try:
        _url_validator(url)
    except ValidationError:
        return False
    return True


def fiscal_field_errors(
    nfe_access_key: Optional[str] = None,
    nfe_url: Optional[str] = None,
) -> Dict[str, str]:
    """Validate the supplied fiscal fields; absent fields are skipped.

    Returns a mapping of offending API field name to message, empty when
    everything supplied is valid.
    """
    errors: Dict[str, str] = {}
    if nfe_access_key is not None:
        if not isinstance(nfe_access_key, str) or not _ACCESS_KEY_RE.fullmatch(
            nfe_access_key
        ):
            errors["nfeAccessKey"] = "NF-e access key must be exactly 44 numeric digits."
        elif not validate_nfe_access_key(nfe_access_key):
            errors["nfeAccessKey"] = "NF-e access key has an invalid Modulo 11 check digit."
    if nfe_url is not None and not validate_nfe_url(nfe_url):
        errors["nfeUrl"] = "nfeUrl must be a valid URL."
    return errors
