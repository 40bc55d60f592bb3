from pydantic import BaseModel


class OrchestratorSettings(BaseModel):
    """Timeouts and limits the provisioning components run with"""

    transaction_timeout_seconds: float = 5.0
    processing_lease_seconds: int = 300
    setup_link_tenant_limit: int = 3
    setup_link_tenant_window_minutes: int = 30
    setup_link_actor_limit: int = 5
    setup_link_actor_window_minutes: int = 60

    @classmethod
    def from_config(cls, config) -> "OrchestratorSettings":
        return cls(
            transaction_timeout_seconds=config.TRANSACTION_TIMEOUT_SECONDS,
            processing_lease_seconds=config.PROCESSING_LEASE_SECONDS,
            setup_link_tenant_limit=config.SETUP_LINK_TENANT_LIMIT,
            setup_link_tenant_window_minutes=config.SETUP_LINK_TENANT_WINDOW_MINUTES,
            setup_link_actor_limit=config.SETUP_LINK_ACTOR_LIMIT,
            setup_link_actor_window_minutes=config.SETUP_LINK_ACTOR_WINDOW_MINUTES,
        )
