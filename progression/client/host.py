"""
The embedding host frame, as seen by the widget.

The host supplies the learner id and performs navigation on the widget's
behalf; how it does that (window messages, query parameters) is its own
business.
"""
from typing import List, Optional

from progression.errors import require_id


class HostContext:
    def get_learner_id(self) -> str:
        raise NotImplementedError

    def navigate_to(self, url: str) -> None:
        raise NotImplementedError


class StaticHostContext(HostContext):
    """Host with a fixed learner id; navigations are kept in order for inspection"""

    def __init__(self, learner_id: Optional[str]):
        self._learner_id = learner_id
        self.navigations: List[str] = []

    def get_learner_id(self) -> str:
        return require_id(self._learner_id, "memberId")

    def navigate_to(self, url: str) -> None:
        self.navigations.append(url)
