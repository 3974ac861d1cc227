"""
Tests for providers, prompting and API key handling.

Hosted providers are exercised with mocked SDK clients; no network access
is needed.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from doctrans_llms.keys import KeyManager, mask_key, provider_config, require_key
from doctrans_llms.models import Language, TranslationRequest
from doctrans_llms.translate import DummyProvider, create_provider
from doctrans_llms.translate.llm import (
    AnthropicProvider,
    DeepSeekProvider,
    OpenAIProvider,
    ProviderConfig,
)
from doctrans_llms.translate.prompting import build_instruction, unwrap_source_text


def openai_chunk(content):
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=content))])


@pytest.fixture
def key_manager(tmp_path, monkeypatch):
    """KeyManager backed only by a temporary config file."""
    for var in ("OPENAI_API_KEY", "DEEPSEEK_API_KEY", "ANTHROPIC_API_KEY"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(KeyManager, "_load_keyring", lambda self: None)
    return KeyManager(config_dir=tmp_path)


class TestPrompting:
    """Instruction construction."""

    def test_explicit_languages(self):
        instruction = build_instruction("Hello", Language.ENGLISH, Language.PERSIAN)

        assert instruction.startswith(
            "Translate the following text from English to Persian (Farsi)."
        )

    def test_auto_detect_source(self):
        instruction = build_instruction("Hello", Language.AUTO, Language.ENGLISH)

        assert "from the detected source language to English" in instruction

    def test_text_is_fenced(self):
        text = 'He said """stop"""\n\nand left.'

        assert unwrap_source_text(build_instruction(text, Language.AUTO, Language.PERSIAN)) == text

    def test_unwrap_unrelated_text(self):
        assert unwrap_source_text("plain prompt") is None


class TestLanguages:
    """Language parsing and requests."""

    @pytest.mark.parametrize("value,expected", [
        ("en", Language.ENGLISH),
        ("Farsi", Language.PERSIAN),
        ("fa", Language.PERSIAN),
        ("Persian (Farsi)", Language.PERSIAN),
        ("auto", Language.AUTO),
    ])
    def test_parse(self, value, expected):
        assert Language.parse(value) == expected

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            Language.parse("klingon")

    def test_auto_target_rejected(self):
        with pytest.raises(ValueError):
            TranslationRequest(Language.ENGLISH, Language.AUTO, "Hi")

    def test_swap(self):
        swapped = TranslationRequest(Language.ENGLISH, Language.PERSIAN, "Hi").swapped()

        assert swapped.source_language == Language.PERSIAN
        assert swapped.target_language == Language.ENGLISH

    def test_swap_with_auto_source(self):
        swapped = TranslationRequest(Language.AUTO, Language.PERSIAN, "Hi").swapped()

        assert swapped.source_language == Language.PERSIAN
        assert swapped.target_language == Language.ENGLISH

    def test_direction(self):
        assert Language.PERSIAN.direction == "rtl"
        assert Language.ENGLISH.direction == "ltr"


class TestProviderFactory:
    """create_provider() backends."""

    def test_dummy(self):
        provider = create_provider("dummy")
        assert isinstance(provider, DummyProvider)
        assert provider.name == "dummy-prefix"

    def test_echo(self):
        assert create_provider("echo").name == "dummy-echo"

    def test_aliases(self):
        config = ProviderConfig(api_key="k")
        assert isinstance(create_provider("gpt", config), OpenAIProvider)
        assert isinstance(create_provider("ds", config), DeepSeekProvider)
        assert isinstance(create_provider("claude", config), AnthropicProvider)

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown provider backend"):
            create_provider("nonexistent")

    def test_dummy_upper(self):
        provider = DummyProvider(mode="upper")
        instruction = build_instruction("abc", Language.AUTO, Language.PERSIAN)

        assert "".join(provider.stream(instruction, "", 0.3)) == "ABC"


class TestHostedProviders:
    """Streaming through mocked SDK clients."""

    def test_openai_streams_deltas(self):
        provider = OpenAIProvider(ProviderConfig(api_key="sk-test", model="gpt-4o-mini"))
        client = MagicMock()
        client.chat.completions.create.return_value = iter([
            openai_chunk("سلام"),
            openai_chunk(None),
            SimpleNamespace(choices=[]),
            openai_chunk(" دنیا"),
        ])
        provider._client = client

        fragments = list(provider.stream("instruction", "system", 0.3))

        assert fragments == ["سلام", " دنیا"]
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["stream"] is True
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["temperature"] == 0.3
        assert kwargs["messages"][0] == {"role": "system", "content": "system"}

    def test_deepseek_defaults(self):
        provider = DeepSeekProvider(ProviderConfig(api_key="k", model=None))

        assert provider.model == "deepseek-chat"
        assert provider.name == "deepseek-deepseek-chat"

    def test_anthropic_streams_text(self):
        provider = AnthropicProvider(ProviderConfig(api_key="k", model=None))
        client = MagicMock()
        stream = client.messages.stream.return_value.__enter__.return_value
        stream.text_stream = iter(["Hello", "", " world"])
        provider._client = client

        assert list(provider.stream("instruction", "system", 0.3)) == ["Hello", " world"]
        assert client.messages.stream.call_args.kwargs["system"] == "system"

    def test_missing_key(self):
        provider = OpenAIProvider(ProviderConfig(api_key=None))

        with pytest.raises(ValueError, match="API key required"):
            provider._require_key()


class TestKeys:
    """API key storage and lookup."""

    def test_env_takes_priority(self, key_manager, monkeypatch):
        key_manager.set_key("openai", "sk-from-config")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-from-env")

        info = key_manager.get_key_info("openai")

        assert key_manager.get_key("openai") == "sk-from-env"
        assert info.source == "env"

    def test_config_file_storage(self, key_manager):
        assert key_manager.set_key("deepseek", "ds-key-123456789") == "config"

        assert key_manager.get_key("ds") == "ds-key-123456789"
        assert key_manager.get_key_info("deepseek").source == "config"

    def test_delete(self, key_manager):
        key_manager.set_key("anthropic", "k")

        assert key_manager.delete_key("claude")
        assert key_manager.get_key("anthropic") is None
        assert not key_manager.delete_key("anthropic")

    def test_unreadable_config_is_ignored(self, key_manager):
        key_manager.config_file.write_text("{not json", encoding="utf-8")

        assert key_manager.get_key("openai") is None

    def test_list_keys(self, key_manager):
        services = [info.service for info in key_manager.list_keys()]

        assert services == ["openai", "deepseek", "anthropic"]

    def test_mask_key(self):
        assert mask_key("sk-abcdefghijklmnop") == "sk-a...mnop"
        assert mask_key("short") == "*****"

    def test_require_key_missing(self, key_manager):
        with pytest.raises(ValueError, match="OPENAI_API_KEY"):
            require_key("openai", key_manager)

    def test_provider_config(self, key_manager):
        key_manager.set_key("openai", "sk-test")

        config = provider_config("gpt", model="gpt-4o-mini", timeout=5, manager=key_manager)

        assert config.api_key == "sk-test"
        assert config.model == "gpt-4o-mini"
        assert config.timeout == 5

    def test_provider_config_dummy_needs_no_key(self, key_manager):
        assert provider_config("dummy", manager=key_manager).api_key is None
