from sparkwell.modules.profile.service import ProfileService

__all__ = ["ProfileService"]
