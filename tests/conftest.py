"""
Pytest configuration and shared fixtures.
"""

import asyncio
from typing import Callable, List, Optional, Union

import pytest
from fastapi.testclient import TestClient

from devassist.llm.prompts import ERROR_SOLUTION_SYSTEM, SNIPPET_METADATA_SYSTEM, SUGGESTION_SYSTEM
from devassist.llm.provider import CompletionRequest, LLMProvider
from devassist.storage.code_store import CodeStore


class FakeProvider(LLMProvider):
    """
    Scripted completion provider.

    ``reply`` is either a fixed string or a callable receiving the request.
    Every request is recorded. ``error`` is raised instead of replying.
    """

    def __init__(
        self,
        reply: Union[str, Callable[[CompletionRequest], str]] = "",
        error: Optional[Exception] = None,
        yield_control: bool = False,
    ):
        self.model = "fake-model"
        self.reply = reply
        self.error = error
        self.yield_control = yield_control
        self.requests: List[CompletionRequest] = []
        self.closed = False

    async def complete(self, request: CompletionRequest) -> str:
        self.requests.append(request)
        if self.yield_control:
            await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        if callable(self.reply):
            return self.reply(request)
        return self.reply

    async def aclose(self) -> None:
        self.closed = True

    def requests_for(self, system_prompt: str) -> List[CompletionRequest]:
        return [r for r in self.requests if r.system_prompt == system_prompt]

    @property
    def error_requests(self) -> List[CompletionRequest]:
        return self.requests_for(ERROR_SOLUTION_SYSTEM)

    @property
    def suggestion_requests(self) -> List[CompletionRequest]:
        return self.requests_for(SUGGESTION_SYSTEM)

    @property
    def metadata_requests(self) -> List[CompletionRequest]:
        return self.requests_for(SNIPPET_METADATA_SYSTEM)


def routed_reply(
    error: str = "",
    suggestions: str = "",
    metadata: str = "",
) -> Callable[[CompletionRequest], str]:
    """Build a reply function that answers per request type."""

    def reply(request: CompletionRequest) -> str:
        if request.system_prompt == ERROR_SOLUTION_SYSTEM:
            return error
        if request.system_prompt == SUGGESTION_SYSTEM:
            return suggestions
        if request.system_prompt == SNIPPET_METADATA_SYSTEM:
            return metadata
        return ""

    return reply


@pytest.fixture
def store():
    """
    Provide an initialized in-memory code store.

    A fresh database is created for each test and disposed afterward.
    """
    code_store = CodeStore("sqlite:///:memory:")
    code_store.init()
    yield code_store
    code_store.close()


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def client(store, fake_provider):
    """
    Provide a test client for FastAPI backed by the in-memory store.

    Returns:
        TestClient: Test client for making requests to the app
    """
    from devassist.config import Settings
    from devassist.main import create_app

    app = create_app(
        store=store,
        llm_provider=fake_provider,
        config=Settings(similarity_backend="sequence", retention_days=30),
    )
    return TestClient(app)
