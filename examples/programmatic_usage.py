import asyncio
import os
import tempfile

from dotenv import load_dotenv

# Import the necessary components
from guarded_fs.config import build_policy
from guarded_fs.core.guard import CallbackConfirmationProvider
from guarded_fs.dispatcher import ToolDispatcher
from guarded_fs.types import ConfirmationAction, ConfirmationResponse

# Load environment variables (FS_ALLOWED_DIRS, FS_MAX_FILE_SIZE, ...)
load_dotenv()


# Example of a custom confirmation callback for web deployment
def web_confirmation_callback(request):
    """Example callback for web deployment.

    In a real web app, this would:
    1. Send the request and its schema to the frontend
    2. Wait for the user to tick the boxes
    3. Return the structured answer
    """
    # For this example, we'll still use input()
    print(f"\n[Web callback] Confirm: {request.message}")
    answer = input("Type 'yes' to confirm both the risk and the backup: ")
    confirmed = answer.strip().lower() == "yes"
    return ConfirmationResponse(
        action=ConfirmationAction.ACCEPT if confirmed else ConfirmationAction.DECLINE,
        content={"confirm_risk": confirmed, "confirm_backup": confirmed},
    )


async def main():
    # 1. Build the policy
    # With no FS_ALLOWED_DIRS in the environment we use a scratch directory
    workspace = tempfile.mkdtemp(prefix="guarded-fs-")
    allowed = [os.environ["FS_ALLOWED_DIRS"]] if os.getenv("FS_ALLOWED_DIRS") else [workspace]
    policy = build_policy(allowed_dirs=allowed)

    # 2. Create the dispatcher
    # Without a provider every force delete is rejected (fail closed)
    dispatcher = ToolDispatcher.from_policy(
        policy, CallbackConfirmationProvider(web_confirmation_callback)
    )

    # 3. Call some tools
    notes = os.path.join(policy.allowed_directories[0], "notes.txt")
    with open(notes, "w") as f:
        f.write("hello")

    for name, arguments in [
        ("file-info", {"path": notes}),
        ("copy-file", {"source": notes, "destination": notes + ".bak"}),
        ("list-directory", {"path": policy.allowed_directories[0], "details": True}),
        ("file-info", {"path": "/etc/passwd"}),  # outside the allow-list
    ]:
        response = await dispatcher.call(name, arguments)
        print(f"--- {name} (error={response.is_error})")
        print(response.text)

    # 4. A force delete goes through the confirmation callback
    response = await dispatcher.call("delete-file", {"path": notes + ".bak", "force": True})
    print(response.text)


if __name__ == "__main__":
    asyncio.run(main())
