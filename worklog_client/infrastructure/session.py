"""Per-session identity sent with every write."""

import uuid
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ClientSession:
    """One browser-session equivalent.

    ``client_id`` stays stable for the lifetime of the session and lets the
    backend attribute writes (``completedBy``) to it.
    """

    client_id: str = field(default_factory=lambda: str(uuid.uuid4()))
