"""
Deploy Configuration
Loads network, build and confirmation settings from config/deploy_config.json
"""

import json
from typing import Dict
from loguru import logger
from dotenv import load_dotenv


DEFAULT_CONFIG_PATH = "config/deploy_config.json"

DEFAULT_CONFIRMATION = {
    'initial_delay': 3.0,
    'interval': 1.0,
    'backoff': 2.0,
    'max_interval': 10.0,
    'max_attempts': 10
}


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> Dict:
    """
    Load deployment configuration

    Args:
        config_path: Path to JSON config file

    Returns:
        Config dict
    """
    load_dotenv()

    with open(config_path, 'r') as f:
        config = json.load(f)

    logger.debug(f"Loaded config from {config_path}")
    return config


def get_network_config(config: Dict, network: str) -> Dict:
    """
    Get settings for a single network

    Args:
        config: Full config dict
        network: Network name (localterra, testnet, mainnet)

    Returns:
        Network config dict
    """
    networks = config.get('networks', {})

    if network not in networks:
        known = ', '.join(sorted(networks)) or 'none'
        raise ValueError(f"Unknown network: {network} (known: {known})")

    return networks[network]


def get_confirmation_settings(config: Dict) -> Dict:
    """Poller settings with defaults filled in"""
    settings = dict(DEFAULT_CONFIRMATION)
    settings.update(config.get('confirmation', {}))
    return settings
