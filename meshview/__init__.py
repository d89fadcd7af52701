# meshview/__init__.py
from meshview.logging_config import setup_logging
from meshview.settings import DEFAULT_SETTINGS, PipelineSettings

__version__ = "0.1.0"

__all__ = ["setup_logging", "DEFAULT_SETTINGS", "PipelineSettings", "__version__"]
