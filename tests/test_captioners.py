import base64
from unittest.mock import Mock, patch

import pytest
import requests
from openai import OpenAIError

from backend.errors.caption_errors import CaptionTransportError
from backend.llms.captioner_factory import CaptionerFactory
from backend.llms.ollama_captioner import OllamaCaptioner, resolve_ollama_host
from backend.llms.openai_captioner import OpenAICaptioner
from backend.models.caption_models import CaptionRequest
from backend.vision.caption_pipeline import CaptionPipeline, build_generation_options
from config.settings import CaptionSettings
from conftest import PNG_BYTES


def _request(path="photo.png", system="Be neutral.", one_sentence=False):
    return CaptionRequest(
        prompt="Describe this image.",
        system_prompt=system,
        image_bytes=PNG_BYTES,
        image_path=path,
        model="qwen2.5vl",
        options=build_generation_options(one_sentence),
    )


def _ok_response(payload):
    response = Mock()
    response.status_code = 200
    response.json.return_value = payload
    return response


class TestResolveOllamaHost:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("", "http://127.0.0.1:11434"),
            ("localhost", "http://localhost:11434"),
            ("0.0.0.0:9999", "http://0.0.0.0:9999"),
            ("https://ollama.example.com", "https://ollama.example.com:443"),
            ("http://gpu-box:11434/", "http://gpu-box:11434"),
        ],
    )
    def test_host_forms(self, raw, expected):
        assert resolve_ollama_host(raw) == expected

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("OLLAMA_HOST", "gpu-box:8080")

        assert resolve_ollama_host() == "http://gpu-box:8080"


class TestOllamaCaptioner:
    @patch("requests.post")
    def test_chat_payload(self, mock_post):
        mock_post.return_value = _ok_response(
            {"message": {"role": "assistant", "content": " A red barn. \n"}}
        )
        captioner = OllamaCaptioner(host="localhost:11434", timeout=30)

        text = captioner.caption(_request(one_sentence=True))

        assert text == "A red barn."
        args, kwargs = mock_post.call_args
        assert args[0] == "http://localhost:11434/api/chat"
        assert kwargs["timeout"] == 30
        payload = kwargs["json"]
        assert payload["model"] == "qwen2.5vl"
        assert payload["stream"] is False
        assert payload["options"] == {
            "num_predict": 200,
            "temperature": 0,
            "seed": 1,
            "stop": ["."],
        }
        system, user = payload["messages"]
        assert system == {"role": "system", "content": "Be neutral."}
        assert user["role"] == "user"
        assert user["content"] == "Describe this image."
        assert base64.b64decode(user["images"][0]) == PNG_BYTES

    @patch("requests.post")
    def test_no_system_message_when_empty(self, mock_post):
        mock_post.return_value = _ok_response({"message": {"content": "A cat."}})

        OllamaCaptioner(host="localhost").caption(_request(system=None))

        messages = mock_post.call_args.kwargs["json"]["messages"]
        assert [m["role"] for m in messages] == ["user"]

    @patch("requests.post")
    def test_connection_error(self, mock_post):
        mock_post.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(CaptionTransportError, match="Failed to connect to Ollama"):
            OllamaCaptioner(host="localhost").caption(_request())

    @patch("requests.post")
    def test_http_error(self, mock_post):
        response = Mock()
        response.status_code = 404
        response.json.return_value = {"error": 'model "qwen2.5vl" not found'}
        mock_post.return_value = response

        with pytest.raises(CaptionTransportError, match="not found") as exc_info:
            OllamaCaptioner(host="localhost").caption(_request())

        assert exc_info.value.status_code == 404
        assert exc_info.value.image_path == "photo.png"

    @patch("requests.post")
    def test_unexpected_format(self, mock_post):
        mock_post.return_value = _ok_response({"response": "generate-style answer"})

        with pytest.raises(CaptionTransportError, match="Unexpected Ollama response format"):
            OllamaCaptioner(host="localhost").caption(_request())

    @patch("requests.get")
    def test_is_available(self, mock_get):
        mock_get.return_value = Mock(status_code=200)
        assert OllamaCaptioner(host="localhost").is_available()

        mock_get.side_effect = requests.exceptions.ConnectionError("down")
        assert not OllamaCaptioner(host="localhost").is_available()


class TestOpenAICaptioner:
    def _captioner(self, reply="  A lighthouse at dusk.  "):
        captioner = OpenAICaptioner(base_url="http://localhost:1234/v1")
        choice = Mock()
        choice.message.content = reply
        captioner._client = Mock()
        captioner._client.chat.completions.create.return_value = Mock(choices=[choice])
        return captioner

    def test_chat_completion_request(self):
        captioner = self._captioner()

        text = captioner.caption(_request(path="shot.PNG", one_sentence=True))

        assert text == "A lighthouse at dusk."
        kwargs = captioner._client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "qwen2.5vl"
        assert kwargs["max_tokens"] == 200
        assert kwargs["temperature"] == 0.0
        assert kwargs["seed"] == 1
        assert kwargs["stop"] == ["."]

        system, user = kwargs["messages"]
        assert system == {"role": "system", "content": "Be neutral."}
        text_part, image_part = user["content"]
        assert text_part == {"type": "text", "text": "Describe this image."}
        url = image_part["image_url"]["url"]
        assert url.startswith("data:image/png;base64,")
        assert base64.b64decode(url.split(",", 1)[1]) == PNG_BYTES

    def test_jpeg_mime_and_no_stop(self):
        captioner = self._captioner()

        captioner.caption(_request(path="shot.jpeg"))

        kwargs = captioner._client.chat.completions.create.call_args.kwargs
        assert "stop" not in kwargs
        url = kwargs["messages"][-1]["content"][1]["image_url"]["url"]
        assert url.startswith("data:image/jpeg;base64,")

    def test_api_error(self):
        captioner = self._captioner()
        captioner._client.chat.completions.create.side_effect = OpenAIError("boom")

        with pytest.raises(CaptionTransportError, match="OpenAI API error: boom"):
            captioner.caption(_request())

    def test_empty_choices(self):
        captioner = self._captioner()
        captioner._client.chat.completions.create.return_value = Mock(choices=[])

        with pytest.raises(CaptionTransportError, match="no response from OpenAI API"):
            captioner.caption(_request())

    def test_empty_api_key_uses_placeholder(self):
        captioner = OpenAICaptioner(base_url="http://localhost:1234/v1", api_key="")

        assert captioner._client.api_key == "sk-no-key-required"
        assert str(captioner._client.base_url).startswith("http://localhost:1234/v1")


class TestCaptionerFactory:
    def test_empty_url_selects_ollama(self):
        captioner = CaptionerFactory.create(CaptionSettings(openai_url=""))

        assert isinstance(captioner, OllamaCaptioner)

    def test_url_selects_openai(self):
        captioner = CaptionerFactory.create(
            CaptionSettings(openai_url="http://localhost:1234/v1", api_key="secret")
        )

        assert isinstance(captioner, OpenAICaptioner)
        assert captioner.api_key == "secret"

    @patch("requests.post")
    def test_whole_run_uses_one_transport(self, mock_post, image_tree):
        mock_post.return_value = _ok_response({"message": {"content": "A thing."}})
        settings = CaptionSettings(dry_run=True)
        captioner = CaptionerFactory.create(settings)

        CaptionPipeline(captioner, settings).run(str(image_tree))

        assert mock_post.call_count == 4
        urls = {call.args[0] for call in mock_post.call_args_list}
        assert urls == {f"{captioner.base_url}/api/chat"}
