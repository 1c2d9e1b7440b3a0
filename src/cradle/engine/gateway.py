from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol

from .state import Notice


class DecisionGateway(Protocol):
    def request_confirmation(self, title: str, message: str) -> bool: ...

    def notify(self, title: str, message: str) -> None: ...


class NullGateway:
    """Ignores notices and gives the same answer to every confirmation."""

    def __init__(self, confirm: bool = True) -> None:
        self._confirm = confirm

    def request_confirmation(self, title: str, message: str) -> bool:
        return self._confirm

    def notify(self, title: str, message: str) -> None:
        return None


@dataclass
class ScriptedGateway:
    """Answers confirmations from a queue and records everything it was shown.

    When the queue runs dry the `default` answer is used.
    """

    answers: deque[bool] = field(default_factory=deque)
    default: bool = True
    notices: list[Notice] = field(default_factory=list)
    requests: list[Notice] = field(default_factory=list)

    @classmethod
    def answering(cls, answers: Iterable[bool], default: bool = True) -> "ScriptedGateway":
        return cls(answers=deque(answers), default=default)

    def request_confirmation(self, title: str, message: str) -> bool:
        self.requests.append(Notice(title, message))
        if self.answers:
            return self.answers.popleft()
        return self.default

    def notify(self, title: str, message: str) -> None:
        self.notices.append(Notice(title, message))

    def titles(self) -> list[str]:
        return [n.title for n in self.notices]
