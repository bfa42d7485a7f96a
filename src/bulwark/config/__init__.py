"""
Configuration management for Mantissa Bulwark.
"""

from bulwark.config.admission_config import (
    AdmissionConfiguration,
    Backend,
    KubernetesConfig,
    StaticBackendConfig,
    build_admission,
    load_config_from_env,
)

__all__ = [
    "AdmissionConfiguration",
    "Backend",
    "KubernetesConfig",
    "StaticBackendConfig",
    "build_admission",
    "load_config_from_env",
]
