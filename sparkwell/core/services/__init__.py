from sparkwell.core.services.container import (
    ServiceContainer,
    get_service_container,
    initialize_service_container,
    shutdown_service_container,
)

__all__ = [
    "ServiceContainer",
    "get_service_container",
    "initialize_service_container",
    "shutdown_service_container",
]
