"""Identity infrastructure: building verifiers and scheme config from settings."""

from identity.infrastructure.config import (
    build_auth_scheme_config,
    build_federated_identity_verifier,
    build_runtime_environment,
    build_session_token_verifier,
    claim_mapping_for,
)

__all__ = [
    "build_auth_scheme_config",
    "build_federated_identity_verifier",
    "build_runtime_environment",
    "build_session_token_verifier",
    "claim_mapping_for",
]
