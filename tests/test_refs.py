"""
Unit Tests for the Refs Store
"""

import json
import pytest
from unittest.mock import patch

from utils.refs import Refs


@pytest.fixture
def refs_path(tmp_path):
    return tmp_path / 'refs.terrarium.json'


class TestRefs:
    """Test refs load, update and save"""

    def test_missing_file_starts_empty(self, refs_path):
        refs = Refs(str(refs_path), 'testnet')

        assert refs.get_code_id('warp-account') is None
        assert refs.get_address('warp-controller') is None
        assert refs.get_contract('warp-controller') == {}

    def test_set_and_get(self, refs_path):
        refs = Refs(str(refs_path), 'testnet')

        refs.set_code_id('warp-controller', 42)
        refs.set_address('warp-controller', 'terra1abc')

        assert refs.get_code_id('warp-controller') == 42
        assert refs.get_address('warp-controller') == 'terra1abc'
        assert refs.get_contract('warp-controller') == {'codeId': 42, 'address': 'terra1abc'}

    def test_save_and_reload(self, refs_path):
        refs = Refs(str(refs_path), 'testnet')
        refs.set_code_id('warp-account', 41)
        refs.save_refs()

        reloaded = Refs(str(refs_path), 'testnet')

        assert reloaded.get_code_id('warp-account') == 41

    def test_nothing_written_before_save(self, refs_path):
        refs = Refs(str(refs_path), 'testnet')
        refs.set_code_id('warp-account', 41)

        assert not refs_path.exists()

    def test_networks_are_separate(self, refs_path):
        refs_path.write_text(json.dumps({
            'mainnet': {'warp-controller': {'codeId': 7, 'address': 'terra1main'}}
        }))

        refs = Refs(str(refs_path), 'testnet')
        refs.set_code_id('warp-controller', 42)
        refs.save_refs()

        saved = json.loads(refs_path.read_text())
        assert saved['mainnet'] == {'warp-controller': {'codeId': 7, 'address': 'terra1main'}}
        assert saved['testnet'] == {'warp-controller': {'codeId': 42}}

    def test_save_creates_directory(self, tmp_path):
        path = tmp_path / 'deployments' / 'refs.json'
        refs = Refs(str(path), 'localterra')

        refs.save_refs()

        assert path.exists()

    def test_get_contract_is_a_copy(self, refs_path):
        refs = Refs(str(refs_path), 'testnet')
        refs.set_code_id('warp-account', 41)

        refs.get_contract('warp-account')['codeId'] = 99

        assert refs.get_code_id('warp-account') == 41

    def test_malformed_file(self, refs_path):
        refs_path.write_text('{not json')

        with pytest.raises(json.JSONDecodeError):
            Refs(str(refs_path), 'testnet')

    def test_failed_save_keeps_previous_file(self, refs_path):
        refs = Refs(str(refs_path), 'mainnet')
        refs.set_address('warp-controller', 'terra1main')
        refs.save_refs()
        before = refs_path.read_text()

        refs.set_address('warp-controller', 'terra1new')
        with patch('utils.refs.json.dump', side_effect=OSError("No space left on device")):
            with pytest.raises(OSError):
                refs.save_refs()

        assert refs_path.read_text() == before
        assert [p.name for p in refs_path.parent.iterdir()] == [refs_path.name]
