from progression.models.interaction import CharacterInteraction, SCORE_FIELDS
from progression.models.team_settings import TeamSettings
from progression.models.completion import ChallengeCompletion
from progression.models.animation import UnlockAnimationShown

__all__ = [
    'CharacterInteraction',
    'SCORE_FIELDS',
    'TeamSettings',
    'ChallengeCompletion',
    'UnlockAnimationShown'
]
