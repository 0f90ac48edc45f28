"""
Password Rules - strength policy applied when a password is reset
"""

import string
from typing import Callable, Dict, List, Tuple

MIN_LENGTH = 8

# Order matters: violation messages are shown to the user in this order
RULES: List[Tuple[str, Callable[[str], bool]]] = [
    (f"at least {MIN_LENGTH} characters", lambda pw: len(pw) >= MIN_LENGTH),
    ("one uppercase letter", lambda pw: any(c in string.ascii_uppercase for c in pw)),
    ("one digit", lambda pw: any(c in string.digits for c in pw)),
]


def validate_password(password: str) -> Dict:
    """
    Check a password against every rule

    Args:
        password: Candidate password

    Returns:
        Dictionary with "valid" flag and the ordered list of unmet rules
    """
    violations = [description for description, check in RULES if not check(password)]
    return {"valid": not violations, "violations": violations}
