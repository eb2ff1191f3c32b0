from .quest_assignment import QuestAssignment
from .reflection import Reflection

__all__ = ["QuestAssignment", "Reflection"]
