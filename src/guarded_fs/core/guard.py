"""Confirmation gate for destructive operations.

Force deletes (and any other destructive action that opts in) must be
confirmed out-of-band before they run. The guard never talks to a human
itself: it hands a ConfirmationRequest to an injected ConfirmationProvider
and inspects the structured answer.

The gate fails closed. No provider capability, a decline, a timeout, a
malformed answer or a provider crash all count as "not confirmed".
"""

import asyncio
import inspect
import sys
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable

from ..exceptions import ErrorKind, FileSystemError
from ..logging import get_logger
from ..types import (
    ConfirmationAction,
    ConfirmationRequest,
    ConfirmationResponse,
    SecurityPolicy,
)

logger = get_logger(__name__)

CONFIRM_RISK_FIELD = "confirm_risk"
CONFIRM_BACKUP_FIELD = "confirm_backup"

# two separate acknowledgements so a single stray click can't approve
CONFIRMATION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        CONFIRM_RISK_FIELD: {
            "type": "boolean",
            "title": "I understand the risk",
            "description": "This operation cannot be undone.",
        },
        CONFIRM_BACKUP_FIELD: {
            "type": "boolean",
            "title": "I have a backup",
            "description": "I confirm the affected files are backed up or expendable.",
        },
    },
    "required": [CONFIRM_RISK_FIELD, CONFIRM_BACKUP_FIELD],
}

ConfirmationCallback = Callable[[ConfirmationRequest], Any]


async def run_in_daemon_thread(func: Callable[..., Any], *args: Any) -> Any:
    """Run a blocking callable on a daemon thread and await its result.

    A call abandoned after a timeout keeps its thread, but as a daemon it
    does not hold the interpreter open at exit the way an executor worker
    blocked on stdin would.
    """
    loop = asyncio.get_running_loop()
    future = loop.create_future()

    def deliver(setter: Callable[[Any], None], value: Any) -> None:
        if not future.done():
            setter(value)

    def worker() -> None:
        try:
            outcome = (future.set_result, func(*args))
        except Exception as e:
            outcome = (future.set_exception, e)
        try:
            loop.call_soon_threadsafe(deliver, *outcome)
        except RuntimeError:
            # loop closed, nobody is waiting any more
            pass

    threading.Thread(target=worker, name="confirmation-callback", daemon=True).start()
    return await future


class ConfirmationProvider(ABC):
    """Channel through which a confirmation request reaches a human.

    Different providers serve different hosts: an interactive CLI prompt,
    a WebSocket round trip, or nothing at all.
    """

    @property
    def supports_elicitation(self) -> bool:
        """Whether this provider can actually reach someone."""
        return True

    @abstractmethod
    async def request(self, request: ConfirmationRequest) -> ConfirmationResponse | None:
        """Present the request and wait for an answer.

        Returns:
            The answer, or None if nothing usable came back
        """
        pass


class FailClosedConfirmationProvider(ConfirmationProvider):
    """Provider for hosts without any confirmation channel. Always rejects."""

    @property
    def supports_elicitation(self) -> bool:
        return False

    async def request(self, request: ConfirmationRequest) -> ConfirmationResponse | None:
        return None


class CallbackConfirmationProvider(ConfirmationProvider):
    """Provider that delegates to a plain (sync or async) callable.

    Sync callables run on a daemon thread (see run_in_daemon_thread). The
    callable may return a ConfirmationResponse, a wire-style dict
    ({"action": "accept", "content": {...}}) or None.
    """

    def __init__(self, callback: ConfirmationCallback):
        self._callback = callback

    async def request(self, request: ConfirmationRequest) -> ConfirmationResponse | None:
        if inspect.iscoroutinefunction(self._callback):
            answer = await self._callback(request)
        else:
            answer = await run_in_daemon_thread(self._callback, request)
            if inspect.isawaitable(answer):
                answer = await answer

        if answer is None or isinstance(answer, ConfirmationResponse):
            return answer
        return ConfirmationResponse.from_dict(answer)


def prompt_on_terminal(request: ConfirmationRequest) -> ConfirmationResponse:
    """Ask each required question on stdin/stderr (CLI callback).

    Blocks on sys.stdin.readline(), which cannot be interrupted. Used through
    CallbackConfirmationProvider it runs on a daemon thread, so a prompt left
    unanswered after the guard times out does not keep the process alive.
    """
    print(f"\n[Confirmation required]: {request.message}", file=sys.stderr)
    for path in request.affected_paths:
        print(f"  - {path}", file=sys.stderr)

    content: dict[str, bool] = {}
    properties = request.requested_schema.get("properties", {})
    for name in request.required_fields:
        title = properties.get(name, {}).get("title", name)
        print(f"{title}? [y/N]: ", end="", file=sys.stderr, flush=True)
        answer = sys.stdin.readline().strip().lower()
        content[name] = answer in ("y", "yes")
        if not content[name]:
            return ConfirmationResponse(action=ConfirmationAction.DECLINE, content=content)
    return ConfirmationResponse(action=ConfirmationAction.ACCEPT, content=content)


def is_accepted(response: ConfirmationResponse | None, required_fields: list[str]) -> bool:
    """Check that a response explicitly accepts with every required field True."""
    if response is None or response.action is not ConfirmationAction.ACCEPT:
        return False
    # `is True` so "yes", 1 and similar never count
    return all(response.content.get(name) is True for name in required_fields)


class SensitiveOperationGuard:
    """Gates destructive operations behind policy and explicit confirmation.

    Example:
        guard = SensitiveOperationGuard(policy, FailClosedConfirmationProvider())
        await guard.require_confirmation("Force delete", ["/work/a.key"])  # False
    """

    def __init__(
        self,
        policy: SecurityPolicy,
        provider: ConfirmationProvider | None = None,
        timeout: float | None = None,
    ):
        """Initialize the guard.

        Args:
            policy: The security policy in force
            provider: Confirmation channel; defaults to fail-closed
            timeout: Seconds to wait for an answer (defaults to the policy's)
        """
        self.policy = policy
        self.provider = provider or FailClosedConfirmationProvider()
        self.timeout = timeout if timeout is not None else policy.confirmation_timeout

    def with_provider(self, provider: ConfirmationProvider) -> "SensitiveOperationGuard":
        """Return a guard sharing this policy but using another channel."""
        return SensitiveOperationGuard(self.policy, provider, self.timeout)

    async def require_confirmation(self, description: str, affected_paths: list[str]) -> bool:
        """Ask for confirmation of a destructive action.

        Args:
            description: What is about to happen
            affected_paths: Paths the action will touch

        Returns:
            True only for an explicit accept with every required field true
        """
        if not self.provider.supports_elicitation:
            logger.warning("No confirmation channel available, rejecting: %s", description)
            return False

        request = ConfirmationRequest(
            message=description,
            affected_paths=list(affected_paths),
            requested_schema=CONFIRMATION_SCHEMA,
        )

        try:
            response = await asyncio.wait_for(self.provider.request(request), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("Confirmation timed out after %ss: %s", self.timeout, description)
            return False
        except Exception as e:
            logger.warning("Confirmation failed (%s), rejecting: %s", e, description)
            return False

        accepted = is_accepted(response, request.required_fields)
        logger.info("Confirmation %s: %s", "accepted" if accepted else "rejected", description)
        return accepted

    async def ensure_force_allowed(self, description: str, affected_paths: list[str]) -> None:
        """Raise unless a force operation is both permitted and confirmed.

        Raises:
            FileSystemError: PERMISSION_DENIED when the policy disables force
                operations or the confirmation was not granted
        """
        if not self.policy.allow_force_delete:
            raise FileSystemError(
                ErrorKind.PERMISSION_DENIED,
                "Force delete is disabled by the security policy",
                {"paths": list(affected_paths), "reason": "policy"},
            )

        if not self.policy.force_delete_requires_confirmation:
            return

        if not await self.require_confirmation(description, affected_paths):
            raise FileSystemError(
                ErrorKind.PERMISSION_DENIED,
                "Force delete was not confirmed by the user",
                {"paths": list(affected_paths), "reason": "not_confirmed"},
            )
