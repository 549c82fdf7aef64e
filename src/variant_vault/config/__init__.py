from .loader import load_config, load_config_with_overrides
from .schema import VaultConfig, ParserConfig, MatchConfig, ReportConfig

__all__ = [
    "load_config",
    "load_config_with_overrides",
    "VaultConfig",
    "ParserConfig",
    "MatchConfig",
    "ReportConfig",
]
