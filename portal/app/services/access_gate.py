"""Password gate in front of an applicant's full record"""

import hmac
from enum import Enum
from typing import Optional


class AccessDecision(str, Enum):
    GRANTED = "Granted"
    DENIED = "Denied"


def authorize(stored_password: Optional[str], supplied_password: Optional[str]) -> AccessDecision:
    """Grant access iff the supplied password equals the stored one exactly.

    No trimming or case folding. An empty or missing password on either side is denied.
    A denial is a normal result; callers may retry without limit.
    """
    if not stored_password or not supplied_password:
        return AccessDecision.DENIED

    if hmac.compare_digest(stored_password.encode("utf-8"), supplied_password.encode("utf-8")):
        return AccessDecision.GRANTED
    return AccessDecision.DENIED
