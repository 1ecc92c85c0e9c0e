from .loader import config_from_dict, interpolate_env_vars, load_router_config
from .models import ProviderConfig, RouterConfig

__all__ = [
    "ProviderConfig",
    "RouterConfig",
    "config_from_dict",
    "interpolate_env_vars",
    "load_router_config",
]
