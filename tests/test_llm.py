#!/usr/bin/env python3
"""
Tests for the wire-format clients.
"""

import json

import httpx
import pytest

from vibecoder.config import Settings
from vibecoder.contracts import TUTOR_JUDGEMENT_SCHEMA
from vibecoder.errors import EmptyResponseError, NetworkError, ServiceError
from vibecoder.llm import (
    JSON_REMINDER,
    CompatibleClient,
    ConversationTurn,
    ModelRequest,
    NativeClient,
    create_llm_client,
    select_wire_format,
)


def _native_ok(text):
    return {'candidates': [{'content': {'parts': [{'text': text}]}}]}


def _chat_ok(text):
    return {
        'id': 'chatcmpl-1',
        'object': 'chat.completion',
        'created': 0,
        'model': 'test-model',
        'choices': [{
            'index': 0,
            'finish_reason': 'stop',
            'message': {'role': 'assistant', 'content': text},
        }],
    }


def _recording_client(handler, seen):
    def wrapped(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)
    return httpx.AsyncClient(transport=httpx.MockTransport(wrapped))


REQUEST = ModelRequest(
    turns=[ConversationTurn('user', 'hi'), ConversationTurn('model', 'hello'),
           ConversationTurn('user', 'import pygame please')],
    system_instruction='You are a tutor. Reply in JSON.',
    output_schema=TUTOR_JUDGEMENT_SCHEMA,
)


class TestWireFormatSelection:
    """Tests for choosing native vs compatible mode"""

    def test_no_base_url_is_native(self):
        """Without a base URL the native client is used"""
        settings = Settings(api_key='k')
        assert select_wire_format(settings) == 'native'
        assert isinstance(create_llm_client(settings), NativeClient)

    def test_base_url_is_compatible(self):
        """A base URL selects the compatible client"""
        settings = Settings(api_key='k', base_url='https://hub.example.com')
        assert select_wire_format(settings) == 'compatible'
        assert isinstance(create_llm_client(settings), CompatibleClient)


class TestNativeClient:
    """Tests for the Gemini generateContent format"""

    def test_payload_shape(self):
        """Turns keep their roles, schema goes in generationConfig"""
        client = NativeClient(api_key='k', http_client=httpx.AsyncClient())
        payload = client.build_payload(REQUEST)

        assert [c['role'] for c in payload['contents']] == ['user', 'model', 'user']
        assert payload['contents'][2]['parts'] == [{'text': 'import pygame please'}]
        assert payload['systemInstruction'] == {'parts': [{'text': REQUEST.system_instruction}]}
        assert payload['generationConfig']['responseMimeType'] == 'application/json'
        assert payload['generationConfig']['responseSchema'] is TUTOR_JUDGEMENT_SCHEMA

    def test_payload_without_schema_is_plain_text(self):
        """Plain-text requests ask for text/plain"""
        client = NativeClient(api_key='k', http_client=httpx.AsyncClient())
        payload = client.build_payload(ModelRequest(turns=[ConversationTurn('user', 'x')]))

        assert payload['generationConfig'] == {'responseMimeType': 'text/plain'}
        assert 'systemInstruction' not in payload

    @pytest.mark.asyncio
    async def test_send_puts_key_in_query(self):
        """The key travels as ?key= and never as a header"""
        seen = []
        http = _recording_client(lambda r: httpx.Response(200, json=_native_ok('{"ok": true}')), seen)
        client = NativeClient(api_key='secret', http_client=http)

        text = await client.send('gemini-2.5-flash', REQUEST)

        assert text == '{"ok": true}'
        request = seen[0]
        assert request.method == 'POST'
        assert request.url.path == '/v1beta/models/gemini-2.5-flash:generateContent'
        assert request.url.params['key'] == 'secret'
        assert 'authorization' not in request.headers
        assert json.loads(request.content)['contents'][0]['role'] == 'user'

    @pytest.mark.asyncio
    async def test_non_success_is_service_error(self):
        """Error statuses map to ServiceError with the body"""
        http = _recording_client(lambda r: httpx.Response(429, text='quota exceeded'), [])
        client = NativeClient(api_key='k', http_client=http)

        with pytest.raises(ServiceError) as exc_info:
            await client.send('m', REQUEST)

        assert exc_info.value.status == 429
        assert 'quota exceeded' in exc_info.value.body

    @pytest.mark.asyncio
    async def test_missing_text_is_empty_response(self):
        """No candidates means an empty response"""
        http = _recording_client(lambda r: httpx.Response(200, json={'candidates': []}), [])
        client = NativeClient(api_key='k', http_client=http)

        with pytest.raises(EmptyResponseError):
            await client.send('m', REQUEST)

    @pytest.mark.asyncio
    async def test_transport_failure_is_network_error(self):
        """Connection failures map to NetworkError"""
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = NativeClient(api_key='k', http_client=httpx.AsyncClient(transport=httpx.MockTransport(refuse)))

        with pytest.raises(NetworkError):
            await client.send('m', REQUEST)


class TestCompatibleClient:
    """Tests for the OpenAI-compatible chat completions format"""

    def test_messages_flattened_with_system_first(self):
        """System first, model renamed to assistant"""
        client = CompatibleClient(api_key='k', base_url='https://hub.example.com/')
        messages = client.build_messages(REQUEST)

        assert messages[0] == {'role': 'system', 'content': REQUEST.system_instruction}
        assert [m['role'] for m in messages[1:]] == ['user', 'assistant', 'user']

    def test_json_reminder_appended_to_system(self):
        """System text without 'JSON' gets the reminder appended"""
        client = CompatibleClient(api_key='k', base_url='https://hub.example.com')
        request = ModelRequest(
            turns=[ConversationTurn('user', 'x')],
            system_instruction='Be nice.',
            output_schema=TUTOR_JUDGEMENT_SCHEMA,
        )
        messages = client.build_messages(request)

        assert messages[0]['role'] == 'system'
        assert messages[0]['content'] == 'Be nice. ' + JSON_REMINDER

    def test_json_reminder_inserted_without_system(self):
        """The reminder becomes the system message when none exists"""
        client = CompatibleClient(api_key='k', base_url='https://hub.example.com')
        request = ModelRequest(turns=[ConversationTurn('user', 'x')], output_schema={})
        messages = client.build_messages(request)

        assert messages[0] == {'role': 'system', 'content': JSON_REMINDER}
        assert messages[1] == {'role': 'user', 'content': 'x'}

    def test_no_reminder_without_schema(self):
        """Plain-text requests get no reminder or response_format"""
        client = CompatibleClient(api_key='k', base_url='https://hub.example.com')
        request = ModelRequest(turns=[ConversationTurn('user', 'x')], system_instruction='Be nice.')

        assert client.build_messages(request)[0]['content'] == 'Be nice.'
        assert client.build_options(request) == {'temperature': 0.7}

    def test_schema_requests_json_object(self):
        """A schema asks for json_object output"""
        client = CompatibleClient(api_key='k', base_url='https://hub.example.com')
        options = client.build_options(REQUEST)

        assert options['response_format'] == {'type': 'json_object'}
        assert options['temperature'] == 0.7

    @pytest.mark.asyncio
    async def test_send_uses_bearer_and_v1_path(self):
        """The key travels as a bearer token to /v1/chat/completions"""
        seen = []
        http = _recording_client(lambda r: httpx.Response(200, json=_chat_ok('{"ok": true}')), seen)
        client = CompatibleClient(api_key='secret', base_url='https://hub.example.com/', http_client=http)

        text = await client.send('gpt-4o-mini', REQUEST)

        assert text == '{"ok": true}'
        request = seen[0]
        assert str(request.url) == 'https://hub.example.com/v1/chat/completions'
        assert request.headers['authorization'] == 'Bearer secret'
        assert 'key' not in request.url.params
        body = json.loads(request.content)
        assert body['model'] == 'gpt-4o-mini'
        assert body['response_format'] == {'type': 'json_object'}

    @pytest.mark.asyncio
    async def test_non_success_is_service_error(self):
        """Error statuses map to ServiceError with the body"""
        http = _recording_client(lambda r: httpx.Response(500, json={'error': {'message': 'boom'}}), [])
        client = CompatibleClient(api_key='k', base_url='https://hub.example.com', http_client=http)

        with pytest.raises(ServiceError) as exc_info:
            await client.send('m', REQUEST)

        assert exc_info.value.status == 500

    @pytest.mark.asyncio
    async def test_empty_content_is_empty_response(self):
        """An empty message content is an empty response"""
        http = _recording_client(lambda r: httpx.Response(200, json=_chat_ok('')), [])
        client = CompatibleClient(api_key='k', base_url='https://hub.example.com', http_client=http)

        with pytest.raises(EmptyResponseError):
            await client.send('m', REQUEST)

    @pytest.mark.asyncio
    async def test_transport_failure_is_network_error(self):
        """Connection failures map to NetworkError"""
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        http = httpx.AsyncClient(transport=httpx.MockTransport(refuse))
        client = CompatibleClient(api_key='k', base_url='https://hub.example.com', http_client=http)

        with pytest.raises(NetworkError):
            await client.send('m', REQUEST)


class TestMalformedResponses:
    """Tests for success statuses that carry no usable payload"""

    @pytest.mark.asyncio
    async def test_compatible_truncated_body_is_empty_response(self):
        """A cut-off JSON body on a 200 maps to EmptyResponseError"""
        http = _recording_client(
            lambda r: httpx.Response(200, content=b'{"choices": [',
                                     headers={'content-type': 'application/json'}),
            [],
        )
        client = CompatibleClient(api_key='k', base_url='https://hub.example.com', http_client=http)

        with pytest.raises(EmptyResponseError):
            await client.send('m', REQUEST)

    @pytest.mark.asyncio
    async def test_native_truncated_body_is_empty_response(self):
        """The native client treats the same body the same way"""
        http = _recording_client(
            lambda r: httpx.Response(200, content=b'{"candidates": [',
                                     headers={'content-type': 'application/json'}),
            [],
        )
        client = NativeClient(api_key='k', http_client=http)

        with pytest.raises(EmptyResponseError):
            await client.send('m', REQUEST)

    @pytest.mark.asyncio
    async def test_native_redirect_is_service_error(self):
        """Redirects are not followed and count as a non-success status"""
        http = _recording_client(
            lambda r: httpx.Response(302, headers={'location': 'https://elsewhere.example.com'}, text='moved'),
            [],
        )
        client = NativeClient(api_key='k', http_client=http)

        with pytest.raises(ServiceError) as exc_info:
            await client.send('m', REQUEST)

        assert exc_info.value.status == 302
        assert exc_info.value.body == 'moved'


class TestClientFactory:
    """Tests for create_llm_client wiring"""

    def test_native_gets_shared_http_client(self):
        """The pre-built httpx client is handed to the native client"""
        http = httpx.AsyncClient()
        client = create_llm_client(Settings(api_key='k'), http_client=http)

        assert client.http is http
        assert client.api_key == 'k'

    def test_compatible_gets_base_url(self):
        """The compatible client is pointed at the configured base URL"""
        client = create_llm_client(Settings(api_key='k', base_url='https://hub.example.com'))

        assert client.base_url == 'https://hub.example.com'
        assert str(client.client.base_url).rstrip('/') == 'https://hub.example.com/v1'
