"""autoglm-core: local settings, secret and log storage for the AutoGLM phone agent."""

__version__ = "0.1.0"
