# =============================================================================
# test_config.py - Assembler Configuration Tests
# =============================================================================

from sicxe_sdk.config import AssemblerConfig


class TestAssemblerConfig:
    """Test defaults and environment overrides."""

    def test_defaults(self):
        config = AssemblerConfig()
        assert not config.strict_operands
        assert not config.relative_addressing
        assert config.max_errors == 100
        assert config.text_record_limit == 60

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("SICXE_STRICT_OPERANDS", "true")
        monkeypatch.setenv("SICXE_RELATIVE_ADDRESSING", "1")
        monkeypatch.setenv("SICXE_MAX_ERRORS", "5")
        config = AssemblerConfig.from_env()
        assert config.strict_operands
        assert config.relative_addressing
        assert config.max_errors == 5

    def test_from_env_ignores_malformed(self, monkeypatch):
        monkeypatch.setenv("SICXE_STRICT_OPERANDS", "maybe")
        monkeypatch.setenv("SICXE_MAX_ERRORS", "lots")
        config = AssemblerConfig.from_env()
        assert not config.strict_operands
        assert config.max_errors == 100

    def test_from_env_unset(self, monkeypatch):
        for name in ("SICXE_STRICT_OPERANDS", "SICXE_RELATIVE_ADDRESSING", "SICXE_MAX_ERRORS"):
            monkeypatch.delenv(name, raising=False)
        assert AssemblerConfig.from_env() == AssemblerConfig()
