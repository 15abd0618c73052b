"""
Unit Tests for the Task Runner
"""

import json
import pytest
from unittest.mock import AsyncMock, patch

import main
from blockchain.chain_client import ChainClient, ChainError
from blockchain.deployer import Deployer


@pytest.fixture
def config(tmp_path):
    return {
        'networks': {
            'testnet': {
                'chain_id': 'pisco-1',
                'lcd': 'https://pisco-lcd.terra.dev',
                'rpc': 'https://pisco-rpc.terra.dev:443',
                'gas_prices': '0.15uluna'
            }
        },
        'build': {
            'contracts_dir': str(tmp_path / 'contracts'),
            'artifacts_dir': str(tmp_path / 'artifacts')
        },
        'cli': {'binary': 'terrad', 'keyring_backend': 'test'},
        'refs_path': str(tmp_path / 'refs.terrarium.json')
    }


class TestParseArgs:
    """Test CLI arguments"""

    def test_env_defaults(self, monkeypatch):
        monkeypatch.setenv('DEPLOY_NETWORK', 'testnet')
        monkeypatch.setenv('DEPLOY_SIGNER', 'pisco')

        args = main.parse_args(['deploy_warp'])

        assert args.task == 'deploy_warp'
        assert args.network == 'testnet'
        assert args.signer == 'pisco'
        assert args.config == 'config/deploy_config.json'

    def test_flags_override_env(self, monkeypatch):
        monkeypatch.setenv('DEPLOY_NETWORK', 'testnet')

        args = main.parse_args(['deploy_warp', '--network', 'mainnet', '--signer', 'deployer'])

        assert args.network == 'mainnet'
        assert args.signer == 'deployer'


class TestBuildContext:
    """Test context wiring"""

    @pytest.mark.asyncio
    async def test_context(self, config, monkeypatch):
        monkeypatch.delenv('TERRAD_BINARY', raising=False)

        with patch.object(ChainClient, 'key_address', new=AsyncMock(return_value='terra1pisco')):
            ctx = await main.build_context(config, 'testnet', 'pisco')

        assert ctx.network == 'testnet'
        assert ctx.signer.key.name == 'pisco'
        assert ctx.signer.key.acc_address == 'terra1pisco'
        assert isinstance(ctx.deployer, Deployer)
        assert ctx.deployer.refs is ctx.refs
        assert ctx.refs.network == 'testnet'
        assert ctx.deployer.poller.initial_delay == 3.0
        assert ctx.deployer.client.chain_id == 'pisco-1'
        assert ctx.deployer.client.key_name == 'pisco'

    @pytest.mark.asyncio
    async def test_binary_from_env(self, config, monkeypatch):
        monkeypatch.setenv('TERRAD_BINARY', '/opt/terra/bin/terrad')

        with patch.object(ChainClient, 'key_address', new=AsyncMock(return_value='terra1pisco')):
            ctx = await main.build_context(config, 'testnet', 'pisco')

        assert ctx.deployer.client.binary == '/opt/terra/bin/terrad'

    @pytest.mark.asyncio
    async def test_unknown_network(self, config):
        with pytest.raises(ValueError, match="Unknown network"):
            await main.build_context(config, 'mainnet', 'pisco')

    @pytest.mark.asyncio
    async def test_empty_key_address(self, config):
        with patch.object(ChainClient, 'key_address', new=AsyncMock(return_value='')):
            with pytest.raises(ValueError, match="no address"):
                await main.build_context(config, 'testnet', 'pisco')


class TestRun:
    """Test task execution and exit codes"""

    @pytest.mark.asyncio
    async def test_run_invokes_task(self, config, tmp_path):
        config_path = tmp_path / 'deploy_config.json'
        config_path.write_text(json.dumps(config))
        args = main.parse_args(['deploy_warp', '--network', 'testnet', '--config', str(config_path)])

        deploy_task = AsyncMock(return_value={'address': 'terra1controller'})
        ctx = object()

        with patch('main.get_task', return_value=deploy_task) as get_task, \
                patch('main.build_context', new=AsyncMock(return_value=ctx)) as build_context:
            result = await main.run(args)

        get_task.assert_called_once_with('deploy_warp')
        build_context.assert_awaited_once_with(config, 'testnet', args.signer)
        deploy_task.assert_awaited_once_with(ctx)
        assert result == {'address': 'terra1controller'}

    def test_main_success(self):
        with patch('main.configure_logging'), \
                patch('main.run', new=AsyncMock(return_value={})):
            assert main.main(['deploy_warp']) == 0

    def test_main_failure(self):
        with patch('main.configure_logging'), \
                patch('main.run', new=AsyncMock(side_effect=ChainError("instantiate failed"))):
            assert main.main(['deploy_warp']) == 1
