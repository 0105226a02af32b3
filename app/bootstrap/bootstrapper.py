from app.dependencies.components import get_components
from app.dependencies.services import get_relay_service
from app.services.RelayService.relay_service_interface import RelayServiceInterface


async def bootstrap_relay(
    env: str = "development",
    config_path: str = "configuration",
) -> RelayServiceInterface:
    components = get_components(env=env, config_path=config_path)

    relay: RelayServiceInterface = get_relay_service(components)
    return relay
