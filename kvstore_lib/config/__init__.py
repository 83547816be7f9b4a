from .config import Config, DEFAULT_CONFIG_PATH, config_from_file, has_feature_flag, load_server_config

__all__ = ["Config", "DEFAULT_CONFIG_PATH", "config_from_file", "has_feature_flag", "load_server_config"]
