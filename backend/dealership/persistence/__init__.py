from .sandbox import SandboxController
from .handle import StoreHandle
from .schema import initialize_store
from .fixtures import seed_sandbox_fixtures, SANDBOX_PASSWORD

__all__ = [
    "SandboxController",
    "StoreHandle",
    "initialize_store",
    "seed_sandbox_fixtures",
    "SANDBOX_PASSWORD",
]
