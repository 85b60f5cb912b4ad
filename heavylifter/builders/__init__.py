"""
App builders

- app_generator: idea + platforms -> GeneratedApp from fixed templates
- build_simulator: cosmetic per-platform build progression
"""

from .app_generator import BUILD_SYSTEMS, generate_app, generate_app_name, normalize_platforms
from .build_simulator import BuildSimulator, BuildState, BuildStatus, TaskStatus, build_payload

__all__ = [
    'BUILD_SYSTEMS',
    'generate_app',
    'generate_app_name',
    'normalize_platforms',
    'BuildSimulator',
    'BuildState',
    'BuildStatus',
    'TaskStatus',
    'build_payload',
]
