"""
Tests per ConfigLoader
"""

import pytest
import yaml
from pathlib import Path

from config.config_loader import ConfigLoader, get_xiaoai_home, resolve_path


def write_config(tmp_path: Path, content) -> str:
    config_file = tmp_path / "xiaoai.yaml"
    if isinstance(content, str):
        config_file.write_text(content, encoding='utf-8')
    else:
        config_file.write_text(yaml.dump(content, allow_unicode=True), encoding='utf-8')
    return str(config_file)


def minimal_config() -> dict:
    return {
        'bridge': {'class': 'MockBridge', 'config': {}},
        'engine': {'class': 'ScriptedEngine', 'config': {'replies': {}}},
    }


class TestConfigLoader:
    """Test per il ConfigLoader"""

    def test_load_nonexistent_file(self):
        """Test caricamento file inesistente solleva FileNotFoundError"""
        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            ConfigLoader.load("nonexistent.yaml")

    def test_load_valid_yaml(self, tmp_path):
        """Test caricamento file YAML valido"""
        config = ConfigLoader.load(write_config(tmp_path, minimal_config()))

        assert config['bridge']['class'] == 'MockBridge'
        assert config['engine']['class'] == 'ScriptedEngine'
        assert 'xiaoai_home' in config

    def test_defaults_applied(self, tmp_path):
        """Le sezioni opzionali ricevono i default"""
        data = minimal_config()
        data['bridge'] = {'class': 'MockBridge', 'config': None}

        config = ConfigLoader.load(write_config(tmp_path, data))

        assert config['speaker']['default_text'] == '你好'
        assert config['speaker']['cache_dialect'] is False
        assert config['speaker']['abort_recovery_s'] == 2.0
        assert config['queues']['utterance_maxsize'] == 20
        assert config['logging'] == {}
        assert config['bridge']['config'] == {}

    def test_partial_overrides_keep_other_defaults(self, tmp_path):
        data = minimal_config()
        data['speaker'] = {'cache_dialect': True}

        config = ConfigLoader.load(write_config(tmp_path, data))

        assert config['speaker']['cache_dialect'] is True
        assert config['speaker']['default_text'] == '你好'

    def test_empty_file(self, tmp_path):
        with pytest.raises(ValueError, match="Configuration file is empty"):
            ConfigLoader.load(write_config(tmp_path, ""))

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(yaml.YAMLError, match="YAML parsing error"):
            ConfigLoader.load(write_config(tmp_path, "bridge: [unclosed"))

    @pytest.mark.parametrize("section", ['bridge', 'engine'])
    def test_missing_required_section(self, tmp_path, section):
        """Test validazione configurazione senza bridge o engine"""
        data = minimal_config()
        del data[section]

        with pytest.raises(ValueError, match=f"Missing required '{section}' section"):
            ConfigLoader.load(write_config(tmp_path, data))

    def test_missing_class(self, tmp_path):
        data = minimal_config()
        data['bridge'] = {'config': {}}

        with pytest.raises(ValueError, match="Missing 'class' in bridge configuration"):
            ConfigLoader.load(write_config(tmp_path, data))

    def test_optional_section_must_be_mapping(self, tmp_path):
        data = minimal_config()
        data['speaker'] = ['not', 'a', 'mapping']

        with pytest.raises(ValueError, match="'speaker' section must be a mapping"):
            ConfigLoader.load(write_config(tmp_path, data))

    def test_unknown_class(self, tmp_path):
        """Classe sconosciuta: fail-fast con l'elenco delle disponibili"""
        data = minimal_config()
        data['bridge']['class'] = 'BluetoothBridge'

        with pytest.raises(ValueError, match="Unknown bridge class 'BluetoothBridge'"):
            ConfigLoader.load(write_config(tmp_path, data))

    def test_unknown_class_skipped_without_validation(self, tmp_path):
        data = minimal_config()
        data['engine']['class'] = 'FutureEngine'

        config = ConfigLoader.load(write_config(tmp_path, data), validate_classes=False)

        assert config['engine']['class'] == 'FutureEngine'

    def test_shipped_configs_are_valid(self):
        """I file YAML distribuiti con il progetto si caricano"""
        config_dir = Path(__file__).parent.parent / "config"
        for name in ("xiaoai.yaml", "xiaoai_mock.yaml"):
            config = ConfigLoader.load(str(config_dir / name))
            assert config['bridge']['class']


class TestXiaoaiHome:
    """Test risoluzione della home directory"""

    def test_env_variable(self, tmp_path, monkeypatch):
        monkeypatch.setenv('XIAOAI_HOME', str(tmp_path))
        assert get_xiaoai_home() == tmp_path.resolve()

    def test_auto_detected(self, monkeypatch):
        monkeypatch.delenv('XIAOAI_HOME', raising=False)
        assert (get_xiaoai_home() / "config" / "config_loader.py").exists()

    def test_resolve_relative_path(self, tmp_path, monkeypatch):
        monkeypatch.setenv('XIAOAI_HOME', str(tmp_path))
        assert resolve_path("config/x.yaml") == (tmp_path / "config" / "x.yaml").resolve()

    def test_resolve_absolute_path(self, tmp_path):
        assert resolve_path(str(tmp_path)) == tmp_path.resolve()
