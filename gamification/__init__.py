"""VokaFlow gamification engine: daily missions, rewards and progression."""
from gamification.version import APP_VERSION

__version__ = APP_VERSION
