from sparkwell.modules.reflection.service import ReflectionResult, ReflectionService

__all__ = ["ReflectionResult", "ReflectionService"]
