"""Built-in scripts seeded into an empty store and backfilled when missing."""

from dataclasses import dataclass

from src.store.models import Script

__all__ = ["DefaultScript", "DEFAULT_SCRIPT_CONTENT", "DEFAULT_SCRIPTS"]


DEFAULT_SCRIPT_CONTENT = '''\
import asyncio
import firebase_admin
from firebase_admin import credentials, firestore

# Expert Python Hub - Async Firestore Example
async def main():
    print("🚀 Initializing Expert Python Engine...")

    # In a real environment, initialize with specific credentials
    # if not firebase_admin._apps:
    #     cred = credentials.ApplicationDefault()
    #     firebase_admin.initialize_app(cred)

    print("✅ System Ready.")
    await asyncio.sleep(1)
    print("💡 Tip: Use 'await' for all Firestore operations to keep the Hub responsive.")

if __name__ == "__main__":
    asyncio.run(main())
'''

_ENV_SETUP_CONTENT = '''\
# Environment bootstrap checklist.
# Copy the SHELL lines from the terminal into a real shell.
#
# COMMAND: python3 -m venv .venv
# COMMAND: source .venv/bin/activate
# COMMAND: pip install firebase-admin google-cloud-firestore

print("Environment checklist ready.")
'''


@dataclass(frozen=True)
class DefaultScript:
    """Fixed id / name / content triplet."""
    id:      str
    name:    str
    content: str

    def to_script(self, updated_at: int) -> Script:
        return Script(id=self.id, name=self.name, content=self.content, updated_at=updated_at)


DEFAULT_SCRIPTS = (
    DefaultScript(id="default",   name="main.py",      content=DEFAULT_SCRIPT_CONTENT),
    DefaultScript(id="env-setup", name="setup_env.py", content=_ENV_SETUP_CONTENT),
)
