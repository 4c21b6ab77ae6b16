"""
Shared fixtures: a scripted model client and engine factories.
"""

import asyncio
import json
from typing import List, Optional

import pytest

from vibecoder.curriculum import Level, Step
from vibecoder.errors import NetworkError
from vibecoder.llm import BaseLLMClient, ModelRequest
from vibecoder.tutoring import TutoringEngine


class FakeLLMClient(BaseLLMClient):
    """
    Replays scripted responses in order.

    A scripted item is either payload text or an exception instance to raise.
    When `gate` is set, every send waits on it before answering.
    """

    provider = 'fake'

    def __init__(self, responses=None, gate: Optional[asyncio.Event] = None):
        self.responses = list(responses or [])
        self.requests: List[ModelRequest] = []
        self.models: List[str] = []
        self.gate = gate
        self.closed = False

    def script(self, *responses) -> None:
        self.responses.extend(responses)

    async def send(self, model: str, request: ModelRequest) -> str:
        self.models.append(model)
        self.requests.append(request)
        if self.gate is not None:
            await self.gate.wait()
        if not self.responses:
            raise NetworkError("No scripted response left")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def aclose(self) -> None:
        self.closed = True


def judgement(complete: bool, message: str = "Nice prompt!", code: Optional[str] = None,
              visual_action: Optional[str] = None, correction: Optional[str] = None) -> str:
    payload = {'message': message, 'stepComplete': complete}
    if code is not None:
        payload['code'] = code
    if visual_action is not None:
        payload['visualAction'] = visual_action
    if correction is not None:
        payload['correction'] = correction
    return json.dumps(payload)


def execution(success: bool = True, objective: bool = True, commands=None,
              console: str = "Process finished with exit code 0.") -> str:
    return json.dumps({
        'consoleOutput': console,
        'isSuccess': success,
        'isObjectiveMet': objective,
        'drawingCommands': commands or [],
    })


def make_level(level_id: int = 1, steps: int = 2) -> Level:
    return Level(
        id=level_id,
        world_id=1,
        title=f"Test Level {level_id}",
        description="A level for tests",
        steps=tuple(
            Step(i + 1, f"Do thing {i + 1}", f"Hint {i + 1}", f"ACTION_{i + 1}", f"thing_{i + 1}()")
            for i in range(steps)
        ),
    )


@pytest.fixture
def fake_llm():
    return FakeLLMClient()


@pytest.fixture
def engine(fake_llm):
    """Engine over a small two-level curriculum with no announcement delay"""
    return TutoringEngine(
        fake_llm,
        model='test-model',
        next_step_delay=0,
        levels=[make_level(1, steps=2), make_level(2, steps=3)],
    )


@pytest.fixture
def isolated_home(tmp_path, monkeypatch):
    """Point ~ at a temp dir and clear credential environment variables"""
    monkeypatch.setenv('HOME', str(tmp_path))
    monkeypatch.setenv('USERPROFILE', str(tmp_path))
    for var in ('VIBECODER_API_KEY', 'API_KEY', 'GEMINI_API_KEY',
                'GEMINI_BASE_URL', 'VIBECODER_MODEL'):
        monkeypatch.delenv(var, raising=False)
    return tmp_path
