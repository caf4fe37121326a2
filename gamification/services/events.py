"""Activity events consumed from the host application."""
from dataclasses import dataclass

from gamification.models.mission import MissionActionType


@dataclass(frozen=True)
class ActionEvent:
    """One unit (or ``value`` units) of in-app activity."""
    action_type: MissionActionType
    value: int = 1

    def __post_init__(self):
        if not isinstance(self.action_type, MissionActionType):
            object.__setattr__(self, "action_type", MissionActionType(self.action_type))
        if isinstance(self.value, bool) or not isinstance(self.value, int) or self.value < 1:
            raise ValueError(f"ActionEvent value must be a positive integer, got {self.value!r}")
