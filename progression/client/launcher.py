from typing import Dict, Optional
from urllib.parse import urlencode

from progression.errors import ValidationError


def build_launch_url(
    launch_urls: Dict[str, str],
    character_name: str,
    member_id: str,
    team_id: Optional[str] = None
) -> str:
    """Entry URL of the external call launcher for one character"""
    base = launch_urls.get(character_name)
    if not base:
        raise ValidationError(f"No launch URL configured for character: {character_name}")

    params = {"member_ID": member_id}
    if team_id:
        params["teamId"] = team_id
    params["character"] = character_name

    separator = "&" if "?" in base else "?"
    return f"{base}{separator}{urlencode(params)}"
