"""
Warp Deploy - Main Entry Point
Runs a deployment task against a configured Terra network

Usage:
    python main.py deploy_warp --network testnet --signer pisco
"""

import os
import sys
import asyncio
import argparse
from loguru import logger
from dotenv import load_dotenv

from blockchain import ChainClient, ConfirmationPoller, ContractBuilder, Deployer, Signer
from tasks import TaskContext, get_task
from utils.config import DEFAULT_CONFIG_PATH, load_config, get_network_config, get_confirmation_settings
from utils.refs import DEFAULT_REFS_PATH, Refs


def configure_logging(log_file: str = "data/logs/deploy.log"):
    """stderr at INFO plus a rotating DEBUG file"""
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        level="INFO"
    )
    logger.add(
        log_file,
        rotation="1 day",
        retention="7 days",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}",
        level="DEBUG"
    )


def parse_args(argv=None) -> argparse.Namespace:
    load_dotenv()

    parser = argparse.ArgumentParser(allow_abbrev=False, description='Run a contract deployment task.')
    parser.add_argument('task', help='Task module under tasks/, e.g. deploy_warp')
    parser.add_argument('--network', default=os.getenv('DEPLOY_NETWORK', 'localterra'), help='Network from the config file. Default: %(default)s')
    parser.add_argument('--signer', default=os.getenv('DEPLOY_SIGNER', 'test1'), help='terrad keyring key to sign with. Default: %(default)s')
    parser.add_argument('--config', default=DEFAULT_CONFIG_PATH, metavar='PATH', help='Deploy config file. Default: %(default)s')

    return parser.parse_args(argv)


async def build_context(config: dict, network: str, signer_key: str) -> TaskContext:
    """
    Wire up deployer, signer and refs for a network

    Args:
        config: Loaded deploy config
        network: Network name
        signer_key: Keyring key name
    """
    network_config = get_network_config(config, network)
    build_config = config.get('build', {})
    cli_config = dict(config.get('cli', {}))

    if os.getenv('TERRAD_BINARY'):
        cli_config['binary'] = os.getenv('TERRAD_BINARY')

    refs = Refs(config.get('refs_path', DEFAULT_REFS_PATH), network)
    client = ChainClient(network_config, cli_config, signer_key)
    builder = ContractBuilder(**build_config)
    poller = ConfirmationPoller(**get_confirmation_settings(config))

    deployer = Deployer(builder, client, refs, poller)
    signer = await Signer.from_keyring(client, signer_key)

    return TaskContext(deployer, signer, refs, network)


async def run(args: argparse.Namespace):
    config = load_config(args.config)
    deploy_task = get_task(args.task)

    logger.info("=" * 70)
    logger.info(f"Running {args.task} on {args.network} as {args.signer}")
    logger.info("=" * 70)

    ctx = await build_context(config, args.network, args.signer)
    return await deploy_task(ctx)


def main(argv=None) -> int:
    """Main entry point, returns process exit code"""
    args = parse_args(argv)
    configure_logging()

    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 1
    except Exception as e:
        logger.exception(f"Task {args.task} failed: {e}")
        return 1

    logger.success(f"Task {args.task} completed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
