from sparkwell.modules.quest.catalog import QuestCatalog
from sparkwell.modules.quest.selector import select_quest
from sparkwell.modules.quest.service import QuestProgress, QuestService

__all__ = ["QuestCatalog", "QuestProgress", "QuestService", "select_quest"]
