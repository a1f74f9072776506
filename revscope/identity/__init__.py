"""Actor identity resolution for RevScope.

Exports:
    Actor                     -- A user known to the identity directory.
    IdentityDirectory         -- Abstract lookup contract of the external directory.
    IdentityResolver          -- Display-name fallback chain and reverse lookup.
    HttpIdentityDirectory     -- httpx-backed directory client.
    InMemoryIdentityDirectory -- Directory over a fixed set of actors.
"""

from revscope.identity.http_directory import HttpIdentityDirectory
from revscope.identity.memory_directory import InMemoryIdentityDirectory
from revscope.identity.resolver import (
    UNKNOWN_ACTOR,
    Actor,
    IdentityDirectory,
    IdentityResolver,
    display_name_of,
)

__all__ = [
    "UNKNOWN_ACTOR",
    "Actor",
    "HttpIdentityDirectory",
    "IdentityDirectory",
    "IdentityResolver",
    "InMemoryIdentityDirectory",
    "display_name_of",
]
