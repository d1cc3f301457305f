"""Tests for copy generation and the OpenAI wrapper"""
import json

import httpx
import pytest
from unittest.mock import AsyncMock, Mock
from openai import AuthenticationError

from shopsite_api.core.config import Settings
from shopsite_api.core.content_generator import (
    COPY_SCHEMA,
    build_copy_prompt,
    generate_copy,
    parse_copy_json,
)
from shopsite_api.core.genai_client import GenerationClient, GenerationConfig
from shopsite_api.models.errors import ApplicationError, ErrorCode


def _completion(text):
    response = Mock()
    response.choices = [Mock(message=Mock(content=text))]
    return response


def _client(openai_mock):
    return GenerationClient(GenerationConfig(api_key="sk-test"), client=openai_mock)


class TestParseCopyJson:

    def test_plain_json(self):
        assert parse_copy_json('{"hero": {"heading": "X"}}') == {"hero": {"heading": "X"}}

    def test_json_wrapped_in_prose(self):
        text = 'Here you go:\n```json\n{"hero": {"tagline": "T"}}\n```'
        assert parse_copy_json(text) == {"hero": {"tagline": "T"}}

    def test_garbage_returns_empty(self):
        assert parse_copy_json("not json at all") == {}

    def test_non_object_returns_empty(self):
        assert parse_copy_json("[1, 2, 3]") == {}

    def test_empty_text(self):
        assert parse_copy_json("") == {}


class TestCopyPrompt:

    def test_prompt_names_shop_and_area(self, shop_inputs):
        prompt = build_copy_prompt(shop_inputs)
        assert "The Gentlemen's Lounge" in prompt
        assert "Brooklyn" in prompt
        assert "4 services" in prompt

    def test_schema_is_strict(self):
        assert COPY_SCHEMA["additionalProperties"] is False
        assert set(COPY_SCHEMA["required"]) == {"hero", "about", "services", "contact"}


class TestGenerateCopy:

    @pytest.mark.asyncio
    async def test_returns_parsed_content(self, shop_inputs, sample_content):
        openai_mock = Mock()
        openai_mock.chat.completions.create = AsyncMock(return_value=_completion(json.dumps(sample_content)))

        content = await generate_copy(shop_inputs, _client(openai_mock))

        assert content["hero"]["tagline"] == "Sharp Cuts, Timeless Style"
        kwargs = openai_mock.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["response_format"]["type"] == "json_schema"
        assert kwargs["response_format"]["json_schema"]["strict"] is True

    @pytest.mark.asyncio
    async def test_upstream_failure_raises_generation_failed(self, shop_inputs):
        openai_mock = Mock()
        openai_mock.chat.completions.create = AsyncMock(side_effect=RuntimeError("503"))

        with pytest.raises(ApplicationError) as exc_info:
            await generate_copy(shop_inputs, _client(openai_mock))

        assert exc_info.value.code == ErrorCode.GENERATION_FAILED
        assert exc_info.value.http_status == 500

    @pytest.mark.asyncio
    async def test_rejected_key_raises_upstream_auth(self, shop_inputs):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        error = AuthenticationError("invalid key", response=httpx.Response(401, request=request), body=None)
        openai_mock = Mock()
        openai_mock.chat.completions.create = AsyncMock(side_effect=error)

        with pytest.raises(ApplicationError) as exc_info:
            await generate_copy(shop_inputs, _client(openai_mock))

        assert exc_info.value.code == ErrorCode.UPSTREAM_AUTH
        assert exc_info.value.http_status == 401

    @pytest.mark.asyncio
    async def test_response_without_choices_raises_generation_failed(self, shop_inputs):
        openai_mock = Mock()
        openai_mock.chat.completions.create = AsyncMock(return_value=Mock(choices=[]))

        with pytest.raises(ApplicationError) as exc_info:
            await generate_copy(shop_inputs, _client(openai_mock))

        assert exc_info.value.code == ErrorCode.GENERATION_FAILED


class TestGenerationConfig:

    def test_missing_key_is_configuration_error(self):
        with pytest.raises(ApplicationError) as exc_info:
            GenerationConfig.from_settings(Settings(_env_file=None, openai_api_key=""))

        assert exc_info.value.code == ErrorCode.CONFIGURATION_ERROR
        assert exc_info.value.message == "Server configuration error: API Key missing."

    def test_models_come_from_settings(self):
        config = GenerationConfig.from_settings(
            Settings(_env_file=None, openai_api_key="sk-x", openai_image_model="dall-e-3")
        )
        assert config.api_key == "sk-x"
        assert config.image_model == "dall-e-3"


class TestGenerateImage:

    @pytest.mark.asyncio
    async def test_returns_data_url(self):
        openai_mock = Mock()
        openai_mock.images.generate = AsyncMock(return_value=Mock(data=[Mock(b64_json="QUJD")]))

        result = await _client(openai_mock).generate_image("a barber", "16:9")

        assert result == "data:image/png;base64,QUJD"
        kwargs = openai_mock.images.generate.call_args.kwargs
        assert kwargs["size"] == "1536x1024"
        assert "response_format" not in kwargs

    @pytest.mark.asyncio
    async def test_empty_response_returns_none(self):
        openai_mock = Mock()
        openai_mock.images.generate = AsyncMock(return_value=Mock(data=[]))

        assert await _client(openai_mock).generate_image("a barber") is None

    @pytest.mark.asyncio
    async def test_dalle_requests_base64(self):
        openai_mock = Mock()
        openai_mock.images.generate = AsyncMock(return_value=Mock(data=[Mock(b64_json="QUJD")]))
        client = GenerationClient(GenerationConfig(api_key="sk", image_model="dall-e-3"), client=openai_mock)

        await client.generate_image("a barber")

        assert openai_mock.images.generate.call_args.kwargs["response_format"] == "b64_json"
