"""
Error taxonomy shared by the services, the HTTP layer and the polling client.

"No data yet" is never an error: services return zero metrics, default goals
or None instead of raising.
"""


class ProgressionError(Exception):
    """Base class for progression errors"""


class ValidationError(ProgressionError):
    """Bad identifiers or arguments, raised before storage is touched"""


class TransientIOError(ProgressionError):
    """Storage or network failure; the next poll tick is the retry"""


class InvariantViolation(ProgressionError):
    """Persisted state contradicts a uniqueness guarantee"""


def require_id(value, name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{name} is required")
    return str(value).strip()


def require_pair(member_id, character_name, chain=None):
    """Validate a (learner, character) key, optionally against the chain"""
    member_id = require_id(member_id, "memberId")
    character_name = require_id(character_name, "characterName")
    if chain is not None and character_name not in chain:
        raise ValidationError(f"Unknown character: {character_name}")
    return member_id, character_name
