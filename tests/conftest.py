"""Shared test fixtures and configuration."""

import pytest

from guarded_fs.core import AtomicFileOps, BatchExecutor, PathAuthorizer, SensitiveOperationGuard
from guarded_fs.core.guard import CallbackConfirmationProvider
from guarded_fs.dispatcher import ToolDispatcher
from guarded_fs.types import ConfirmationAction, ConfirmationResponse, SecurityPolicy


def accept_all(request):
    """Confirmation callback that ticks every required box."""
    return ConfirmationResponse(
        action=ConfirmationAction.ACCEPT,
        content={name: True for name in request.required_fields},
    )


@pytest.fixture
def allowed_dir(tmp_path):
    """An allowed directory inside the pytest temp dir."""
    path = tmp_path / "allowed"
    path.mkdir()
    return path


@pytest.fixture
def outside_dir(tmp_path):
    """A sibling directory that is not on the allow-list."""
    path = tmp_path / "outside"
    path.mkdir()
    return path


@pytest.fixture
def policy(allowed_dir):
    """Default policy allowing only `allowed_dir`."""
    return SecurityPolicy(allowed_directories=(str(allowed_dir),))


@pytest.fixture
def authorizer(policy):
    return PathAuthorizer(policy)


@pytest.fixture
def ops(authorizer):
    """File operations with a fail-closed guard."""
    return AtomicFileOps(authorizer)


@pytest.fixture
def confirming_ops(authorizer, policy):
    """File operations whose guard always gets a full confirmation."""
    guard = SensitiveOperationGuard(policy, CallbackConfirmationProvider(accept_all))
    return AtomicFileOps(authorizer, guard)


@pytest.fixture
def batch(ops):
    return BatchExecutor(ops)


@pytest.fixture
def confirming_batch(confirming_ops):
    return BatchExecutor(confirming_ops)


@pytest.fixture
def dispatcher(policy):
    """Dispatcher with the default tools and no confirmation channel."""
    return ToolDispatcher.from_policy(policy)


@pytest.fixture
def accepting_provider():
    """Confirmation provider that always gives a full confirmation."""
    return CallbackConfirmationProvider(accept_all)
