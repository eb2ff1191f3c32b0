"""
Configuration subsystem for Sparkwell.

- **config.py**: Static configuration from environment variables (.env support)
- **manager.py**: Load-once YAML configuration (catalogs, economy tuning)

Usage
-----
```python
from sparkwell.core.config import Config, ConfigManager

db_url = Config.DATABASE_URL

ConfigManager.initialize()
bonus = ConfigManager.get("quests.completion_bonus", 50)
```
"""

from sparkwell.core.config.config import Config, Environment
from sparkwell.core.config.manager import ConfigManager

__all__ = [
    "Config",
    "ConfigManager",
    "Environment",
]
