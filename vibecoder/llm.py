#!/usr/bin/env python3
"""
Protocol adapter for the hosted language model.

One internal contract, two wire formats:
- native: Google Gemini REST (generateContent), credential as ?key=
- compatible: OpenAI-style chat completions on a user-supplied base URL
  (LiteLLM, AI hubs), credential as a bearer token

The format is chosen by whether an alternate base URL is configured.
Clients never retry; retry policy belongs to the caller.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List

import httpx
import openai
from openai import AsyncOpenAI

from .config import Settings
from .errors import NetworkError, ServiceError, EmptyResponseError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0
JSON_REMINDER = "You MUST respond with valid JSON."


@dataclass
class ConversationTurn:
    """One turn of the conversation, role is 'user' or 'model'"""
    role: str
    text: str


@dataclass
class ModelRequest:
    """Everything needed for one model call"""
    turns: List[ConversationTurn] = field(default_factory=list)
    system_instruction: Optional[str] = None
    output_schema: Optional[Dict[str, Any]] = None  # structured-output contract


class BaseLLMClient(ABC):
    """Abstract base class for wire-format clients"""

    provider = ''

    @abstractmethod
    async def send(self, model: str, request: ModelRequest) -> str:
        """
        Send a request and return the payload text.

        Raises:
            NetworkError: transport failure
            ServiceError: non-success response
            EmptyResponseError: success response without usable payload text
        """
        pass

    @abstractmethod
    async def aclose(self) -> None:
        """Release the underlying HTTP client"""
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.aclose()


class NativeClient(BaseLLMClient):
    """Google Gemini REST client"""

    BASE_URL = 'https://generativelanguage.googleapis.com'
    provider = 'native'

    def __init__(
        self,
        api_key: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.api_key = api_key
        self.http = http_client or httpx.AsyncClient(timeout=timeout)

    def endpoint(self, model: str) -> str:
        return f"{self.BASE_URL}/v1beta/models/{model}:generateContent"

    def build_payload(self, request: ModelRequest) -> Dict[str, Any]:
        """Turns keep their roles; the system instruction is a separate field"""
        payload: Dict[str, Any] = {
            'contents': [
                {'role': turn.role, 'parts': [{'text': turn.text}]}
                for turn in request.turns
            ],
        }

        if request.system_instruction:
            payload['systemInstruction'] = {
                'parts': [{'text': request.system_instruction}]
            }

        if request.output_schema is not None:
            payload['generationConfig'] = {
                'responseMimeType': 'application/json',
                'responseSchema': request.output_schema,
            }
        else:
            payload['generationConfig'] = {'responseMimeType': 'text/plain'}

        return payload

    async def send(self, model: str, request: ModelRequest) -> str:
        url = self.endpoint(model)
        logger.info("Mode: Google Native | POST %s", url)

        try:
            response = await self.http.post(
                url,
                params={'key': self.api_key},
                json=self.build_payload(request),
            )
        except httpx.RequestError as e:
            raise NetworkError(f"Request to {url} failed: {e}") from e

        if not response.is_success:
            raise ServiceError(response.status_code, response.text)

        try:
            data = response.json()
            text = data['candidates'][0]['content']['parts'][0]['text']
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise EmptyResponseError("Response has no candidates[0].content.parts[0].text") from e

        if not isinstance(text, str) or not text:
            raise EmptyResponseError("Response text is empty")
        return text

    async def aclose(self) -> None:
        await self.http.aclose()


class CompatibleClient(BaseLLMClient):
    """OpenAI-compatible chat completions client (AI hubs, LiteLLM, ...)"""

    TEMPERATURE = 0.7
    provider = 'compatible'

    def __init__(
        self,
        api_key: str,
        base_url: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip('/')
        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=f"{self.base_url}/v1",
            max_retries=0,
            timeout=timeout,
            http_client=http_client,
        )

    def build_messages(self, request: ModelRequest) -> List[Dict[str, str]]:
        """Flatten into one message list; 'model' becomes 'assistant'"""
        messages = []

        if request.system_instruction:
            messages.append({'role': 'system', 'content': request.system_instruction})

        for turn in request.turns:
            role = 'assistant' if turn.role == 'model' else turn.role
            messages.append({'role': role, 'content': turn.text})

        # json_object mode needs the word JSON somewhere in the prompt
        if request.output_schema is not None:
            mentions_json = any(
                m['role'] == 'system' and 'JSON' in m['content'] for m in messages
            )
            if not mentions_json:
                if messages and messages[0]['role'] == 'system':
                    messages[0]['content'] += ' ' + JSON_REMINDER
                else:
                    messages.insert(0, {'role': 'system', 'content': JSON_REMINDER})

        return messages

    def build_options(self, request: ModelRequest) -> Dict[str, Any]:
        options: Dict[str, Any] = {'temperature': self.TEMPERATURE}
        if request.output_schema is not None:
            options['response_format'] = {'type': 'json_object'}
        return options

    async def send(self, model: str, request: ModelRequest) -> str:
        logger.info("Mode: OpenAI-Compatible | POST %s/v1/chat/completions", self.base_url)

        try:
            completion = await self.client.chat.completions.create(
                model=model,
                messages=self.build_messages(request),
                **self.build_options(request),
            )
        except openai.APIStatusError as e:
            raise ServiceError(e.status_code, e.response.text) from e
        except openai.APIConnectionError as e:
            raise NetworkError(f"Request to {self.base_url} failed: {e}") from e
        except openai.APIResponseValidationError as e:
            raise EmptyResponseError("Response is not a chat completion") from e
        except ValueError as e:
            # Truncated or malformed body on a success status
            raise EmptyResponseError("Response body is not valid JSON") from e

        choices = getattr(completion, 'choices', None)
        if not choices:
            raise EmptyResponseError("Response has no choices")

        message = getattr(choices[0], 'message', None)
        text = getattr(message, 'content', None)
        if not isinstance(text, str) or not text:
            raise EmptyResponseError("Response has no choices[0].message.content")
        return text

    async def aclose(self) -> None:
        await self.client.close()


# Wire format registry
WIRE_FORMATS = {
    'native': {
        'client_class': NativeClient,
        'display_name': 'Google Gemini (native)',
        'auth': 'query parameter',
    },
    'compatible': {
        'client_class': CompatibleClient,
        'display_name': 'OpenAI-compatible hub',
        'auth': 'bearer token',
    },
}


def select_wire_format(settings: Settings) -> str:
    """'compatible' when a base URL is configured, otherwise 'native'"""
    return 'compatible' if settings.compatibility_mode else 'native'


def create_llm_client(
    settings: Settings,
    http_client: Optional[httpx.AsyncClient] = None,
) -> BaseLLMClient:
    """
    Create the client for the configured wire format.

    Args:
        settings: Resolved settings (credential and optional base URL).
        http_client: Optional pre-built httpx client (tests, proxies).
    """
    wire_format = select_wire_format(settings)
    info = WIRE_FORMATS[wire_format]
    logger.debug("Using %s wire format (credential as %s)", info['display_name'], info['auth'])

    kwargs = {'api_key': settings.api_key, 'http_client': http_client}
    if wire_format == 'compatible':
        kwargs['base_url'] = settings.base_url

    client_class = info['client_class']
    return client_class(**kwargs)
