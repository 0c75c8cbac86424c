"""Tests for configuration loading."""

from nano_tryon.config import TryOnConfig, load_config
from nano_tryon.pipeline import TryOnSession, create_session
from nano_tryon.models import AssetKind, Provenance


class TestConfig:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("API_KEY", raising=False)
        config = TryOnConfig(_env_file=None)

        assert config.api_key is None
        assert config.gemini.model == "gemini-2.5-flash-image"
        assert config.gemini.garment_aspect_ratio == "1:1"
        assert config.gemini.tryon_aspect_ratio == "3:4"
        assert config.presets.persons
        assert config.presets.garments

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("API_KEY", "secret")
        monkeypatch.setenv("GEMINI__MODEL", "gemini-3-pro-image-preview")

        config = load_config()

        assert config.api_key == "secret"
        assert config.gemini.model == "gemini-3-pro-image-preview"


class TestCreateSession:

    def test_session_is_seeded_from_presets(self):
        config = TryOnConfig(_env_file=None, api_key="secret")

        session = create_session(config)

        persons = session.registry.collection(AssetKind.PERSON)
        assert isinstance(session, TryOnSession)
        assert len(persons.assets) == len(config.presets.persons)
        assert all(a.provenance == Provenance.PRESET for a in persons.assets)
        assert session.pipeline.provider.is_configured
