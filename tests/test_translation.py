"""Unit tests for translator selection and provider error handling."""

import httpx
import pytest

from feedhub.errors import TranslationFailed
from feedhub.translation import (
    DeepLTranslator,
    GoogleFreeTranslator,
    OpenAITranslator,
    select_translator,
)


@pytest.mark.parametrize(
    "provider,keys,expected",
    [
        ("", {}, GoogleFreeTranslator),
        ("google", {}, GoogleFreeTranslator),
        ("deepl", {}, GoogleFreeTranslator),
        ("deepl", {"deepl_api_key": "abc:fx"}, DeepLTranslator),
        (" DeepL ", {"deepl_api_key": "abc"}, DeepLTranslator),
        ("openai", {}, GoogleFreeTranslator),
        ("openai", {"openai_api_key": "sk-test"}, OpenAITranslator),
        ("babelfish", {"deepl_api_key": "abc"}, GoogleFreeTranslator),
    ],
)
def test_select_translator(provider, keys, expected):
    assert type(select_translator(provider, **keys)) is expected


def test_deepl_free_keys_use_free_host():
    assert "api-free.deepl.com" in DeepLTranslator("abc:fx").endpoint
    assert "api.deepl.com" in DeepLTranslator("abc").endpoint


def test_openai_model_override():
    translator = select_translator("openai", openai_api_key="sk-test", openai_model="gpt-4.1-mini")
    assert translator.model == "gpt-4.1-mini"


def _patch_client(monkeypatch, handler):
    real_client = httpx.Client

    def client(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(handler)
        return real_client(*args, **kwargs)

    monkeypatch.setattr(httpx, "Client", client)


def test_google_response_is_joined(monkeypatch):
    def handler(request):
        assert request.url.params["tl"] == "en"
        return httpx.Response(200, json=[[["Hello ", "Hallo "], ["world", "Welt"]], None, "de"])

    _patch_client(monkeypatch, handler)

    assert GoogleFreeTranslator().translate("Hallo Welt", "en") == "Hello world"


def test_google_http_error(monkeypatch):
    _patch_client(monkeypatch, lambda request: httpx.Response(429))

    with pytest.raises(TranslationFailed):
        GoogleFreeTranslator().translate("Hallo", "en")


def test_deepl_request_and_response(monkeypatch):
    def handler(request):
        assert request.headers["Authorization"] == "DeepL-Auth-Key abc:fx"
        assert b"target_lang=DE" in request.content
        return httpx.Response(200, json={"translations": [{"text": "Hallo"}]})

    _patch_client(monkeypatch, handler)

    assert DeepLTranslator("abc:fx").translate("Hello", "de") == "Hallo"


def test_deepl_empty_response(monkeypatch):
    _patch_client(monkeypatch, lambda request: httpx.Response(200, json={"translations": []}))

    with pytest.raises(TranslationFailed):
        DeepLTranslator("abc").translate("Hello", "de")
