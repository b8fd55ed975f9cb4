"""
Campaign Studio Core Components

Provides foundational infrastructure for the generation services:
- Configuration loaded from the environment
- Credential gate for billing-enabled API keys
- Error taxonomy shared by every generation path
"""

from .config import Config, get_config
from .credentials import (
    CredentialGate,
    EnvCredentialGate,
    SharedSelectionGate,
    ensure_privileged_credential,
)
from .errors import (
    CredentialError,
    GenerationError,
    MediaGenerationError,
    MissingOutputError,
    NetworkError,
    OperationTimeoutError,
    PlanGenerationError,
    SubmissionEntityError,
    SubmissionError,
    ValidationError,
)

__all__ = [
    "Config",
    "get_config",
    "CredentialGate",
    "EnvCredentialGate",
    "SharedSelectionGate",
    "ensure_privileged_credential",
    "CredentialError",
    "GenerationError",
    "MediaGenerationError",
    "MissingOutputError",
    "NetworkError",
    "OperationTimeoutError",
    "PlanGenerationError",
    "SubmissionEntityError",
    "SubmissionError",
    "ValidationError",
]
