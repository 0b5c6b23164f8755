"""
Fake Provider - Test Double Implementation

A FakeProvider implements the real ProviderAdapter interface without making
network calls. It goes through the same RetryPolicy as the real adapters, so
retry and fallback behaviour can be exercised end to end.

This is NOT mocking - it's a proper implementation of the interface. It can
also be used for:
- Local development without API keys
- Demo/sandbox environments

Pattern: FakeRepository test double
"""

from collections.abc import Iterable, Mapping
from typing import Any, Optional, Union

from harmony_gateway.models.domain import OperationKind
from harmony_gateway.providers.base import ProviderAdapter

Outcome = Union[str, Exception]


class FakeProvider(ProviderAdapter):
    """
    Fake generation backend with scripted outcomes.

    Each upstream attempt consumes the next scripted outcome: a string is
    returned, an exception is raised. Once the script runs out, every further
    attempt returns ``response`` (or raises ``error`` when set).

    Attributes:
        calls: (prompt, options) for every upstream attempt, retries included.

    Example:
        >>> provider = FakeProvider(
        ...     name="seedance",
        ...     outcomes=[ProviderError("boom", provider="seedance")],
        ...     response="https://img.example/1.png",
        ... )
        >>> await provider.generate("a cat")  # retried once, then succeeds
        'https://img.example/1.png'
    """

    def __init__(
        self,
        name: str = "fake",
        operations: Optional[Iterable[OperationKind]] = None,
        response: str = "Fake response for testing",
        outcomes: Optional[Iterable[Outcome]] = None,
        error: Optional[Exception] = None,
        api_key: str = "fake-key",
        **kwargs: Any,
    ) -> None:
        super().__init__(api_key=api_key, **kwargs)
        self.name = name
        self.operations = frozenset(operations or OperationKind)
        self.response = response
        self.error = error
        self._outcomes: list[Outcome] = list(outcomes or [])
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.probe_calls = 0

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def _request(self, prompt: str, options: Mapping[str, Any]) -> str:
        self.calls.append((prompt, dict(options)))

        if self._outcomes:
            outcome = self._outcomes.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        if self.error is not None:
            raise self.error
        return self.response

    async def _probe(self) -> None:
        self.probe_calls += 1
        if self.error is not None:
            raise self.error
