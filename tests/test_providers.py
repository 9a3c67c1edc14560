import pytest
import requests
from unittest.mock import MagicMock, patch

from recruit_ai.services import providers
from recruit_ai.services.providers import (
    ProviderConfig,
    ProviderName,
    ProviderResponse,
    check_provider,
    generate_text,
    generate_with_retry,
    get_provider_config,
)
from recruit_ai.utils.exceptions import ConfigurationError, ExternalServiceError


def http_response(payload, status_code=200):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(response=resp)
    return resp


@pytest.fixture
def clean_env(monkeypatch):
    for key in ("AI_PROVIDER", "OPENAI_API_KEY", "OPENAI_MODEL", "XAI_API_KEY", "XAI_MODEL",
                "OLLAMA_MODEL", "OLLAMA_BASE_URL", "MAX_TOKENS", "TEMPERATURE"):
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


class TestProviderConfig:
    """Test cases for reading provider settings from the environment"""

    def test_openai_defaults(self, clean_env):
        clean_env.setenv("OPENAI_API_KEY", "sk-test")
        config = get_provider_config()
        assert config.provider == ProviderName.OPENAI
        assert config.api_key == "sk-test"
        assert config.model == "gpt-4o"
        assert config.max_tokens == 1500
        assert config.temperature == 0.7

    def test_xai_with_model_override(self, clean_env):
        clean_env.setenv("AI_PROVIDER", "XAI")
        clean_env.setenv("XAI_API_KEY", "xai-test")
        clean_env.setenv("XAI_MODEL", "grok-3")
        config = get_provider_config()
        assert config.provider == ProviderName.XAI
        assert config.model == "grok-3"

    def test_ollama_needs_no_key(self, clean_env):
        clean_env.setenv("AI_PROVIDER", "ollama")
        config = get_provider_config()
        assert config.model == "llama3"
        assert config.base_url == "http://localhost:11434"

    def test_missing_key(self, clean_env):
        with pytest.raises(ConfigurationError) as exc_info:
            get_provider_config()
        assert exc_info.value.details["config_key"] == "OPENAI_API_KEY"

    def test_unknown_provider(self, clean_env):
        clean_env.setenv("AI_PROVIDER", "gemini")
        with pytest.raises(ConfigurationError):
            get_provider_config()

    def test_invalid_numeric_setting(self, clean_env):
        clean_env.setenv("OPENAI_API_KEY", "sk-test")
        clean_env.setenv("MAX_TOKENS", "lots")
        with pytest.raises(ConfigurationError):
            get_provider_config()


class TestGenerateText:
    """Test cases for the provider HTTP calls"""

    @patch('recruit_ai.services.providers.requests.post')
    def test_openai_chat_completion(self, mock_post):
        mock_post.return_value = http_response({
            "choices": [{"message": {"content": "hello"}}],
            "usage": {"total_tokens": 12, "prompt_tokens": 10, "completion_tokens": 2},
        })
        config = ProviderConfig(api_key="sk-test")

        result = generate_text("Analyze this", config)

        assert result.text == "hello"
        assert result.usage.total_tokens == 12
        url = mock_post.call_args.args[0]
        kwargs = mock_post.call_args.kwargs
        assert url == "https://api.openai.com/v1/chat/completions"
        assert kwargs["headers"]["Authorization"] == "Bearer sk-test"
        assert kwargs["json"]["model"] == "gpt-4o"
        assert kwargs["json"]["messages"][0]["role"] == "system"
        assert kwargs["json"]["messages"][1] == {"role": "user", "content": "Analyze this"}
        assert kwargs["timeout"] == 120

    @patch('recruit_ai.services.providers.requests.post')
    def test_xai_uses_its_endpoint(self, mock_post):
        mock_post.return_value = http_response({"choices": [{"message": {"content": "ok"}}]})
        config = ProviderConfig(provider=ProviderName.XAI, api_key="xai", model="grok-3-mini")

        result = generate_text("hi", config)

        assert result.text == "ok"
        assert result.usage is None
        assert mock_post.call_args.args[0] == "https://api.x.ai/v1/chat/completions"

    @patch('recruit_ai.services.providers.requests.post')
    def test_ollama_generate(self, mock_post):
        mock_post.return_value = http_response({"response": "local text", "prompt_eval_count": 7, "eval_count": 3})
        config = ProviderConfig(provider=ProviderName.OLLAMA, model="llama3", base_url="http://ollama:11434")

        result = generate_text("hi", config)

        assert result.text == "local text"
        assert result.usage.total_tokens == 10
        assert mock_post.call_args.args[0] == "http://ollama:11434/api/generate"
        assert mock_post.call_args.kwargs["json"]["stream"] is False

    @patch('recruit_ai.services.providers.requests.post')
    def test_http_error(self, mock_post):
        mock_post.return_value = http_response({"error": "bad key"}, status_code=401)

        with pytest.raises(ExternalServiceError) as exc_info:
            generate_text("hi", ProviderConfig(api_key="bad"))

        assert exc_info.value.details["status_code"] == 401
        assert exc_info.value.details["service_name"] == "openai"

    @patch('recruit_ai.services.providers.requests.post')
    def test_connection_error(self, mock_post):
        mock_post.side_effect = requests.ConnectionError("connection refused")

        with pytest.raises(ExternalServiceError):
            generate_text("hi", ProviderConfig(api_key="sk-test"))

    @patch('recruit_ai.services.providers.requests.post')
    def test_malformed_usage_is_dropped(self, mock_post):
        """A null counter is skipped and an unusable usage block is ignored"""
        mock_post.return_value = http_response({
            "choices": [{"message": {"content": "hello"}}],
            "usage": {"total_tokens": None, "prompt_tokens": 5},
        })
        result = generate_text("hi", ProviderConfig(api_key="sk-test"))
        assert result.text == "hello"
        assert result.usage.total_tokens == 0
        assert result.usage.prompt_tokens == 5

        mock_post.return_value = http_response({
            "choices": [{"message": {"content": "hello"}}],
            "usage": {"total_tokens": "many"},
        })
        assert generate_text("hi", ProviderConfig(api_key="sk-test")).usage is None

    @patch('recruit_ai.services.providers.requests.post')
    def test_malformed_choices(self, mock_post):
        mock_post.return_value = http_response({"choices": ["not an object"], "usage": "n/a"})
        result = generate_text("hi", ProviderConfig(api_key="sk-test"))
        assert result.text == ""
        assert result.usage is None

        mock_post.return_value = http_response({"choices": [{"message": {"content": 42}}]})
        assert generate_text("hi", ProviderConfig(api_key="sk-test")).text == ""

    @patch('recruit_ai.services.providers.requests.post')
    def test_non_object_body(self, mock_post):
        mock_post.return_value = http_response(["unexpected"])

        with pytest.raises(ExternalServiceError):
            generate_text("hi", ProviderConfig(api_key="sk-test"))

    @patch('recruit_ai.services.providers.requests.post')
    def test_ollama_missing_counters(self, mock_post):
        mock_post.return_value = http_response({"response": "local text", "eval_count": 4})
        config = ProviderConfig(provider=ProviderName.OLLAMA, model="llama3")

        result = generate_text("hi", config)

        assert result.usage.completion_tokens == 4
        assert result.usage.total_tokens == 4

    @patch('recruit_ai.services.providers.requests.post')
    def test_empty_choices(self, mock_post):
        mock_post.return_value = http_response({"choices": []})
        assert generate_text("hi", ProviderConfig(api_key="sk-test")).text == ""


class TestRetryAndCheck:
    """Test cases for retries and the provider self-test"""

    @patch('recruit_ai.utils.exceptions.time.sleep')
    @patch('recruit_ai.services.providers.generate_text')
    def test_retry_recovers(self, mock_generate, mock_sleep):
        mock_generate.side_effect = [ExternalServiceError("flaky"), ProviderResponse(text="ok")]

        result = generate_with_retry("hi", ProviderConfig(api_key="sk-test"))

        assert result.text == "ok"
        assert mock_generate.call_count == 2
        assert mock_sleep.call_count == 1

    @patch('recruit_ai.utils.exceptions.time.sleep')
    @patch('recruit_ai.services.providers.generate_text')
    def test_retry_gives_up(self, mock_generate, mock_sleep):
        mock_generate.side_effect = ExternalServiceError("down")

        with pytest.raises(ExternalServiceError):
            generate_with_retry("hi", ProviderConfig(api_key="sk-test"))

        assert mock_generate.call_count == 3

    @patch('recruit_ai.services.providers.generate_text')
    def test_check_provider_success(self, mock_generate):
        mock_generate.return_value = ProviderResponse(text="Test successful")
        assert check_provider(ProviderConfig(api_key="sk-test")) is True
        assert mock_generate.call_args.args[1].max_tokens == 20

    @patch('recruit_ai.services.providers.generate_text')
    def test_check_provider_failure(self, mock_generate):
        mock_generate.side_effect = ExternalServiceError("down")
        assert check_provider(ProviderConfig(api_key="sk-test")) is False

    def test_available_models_cover_every_provider(self):
        assert set(providers.AVAILABLE_MODELS) == {p.value for p in ProviderName}
