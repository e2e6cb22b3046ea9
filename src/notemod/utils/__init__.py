from .logging_utils import configure_logging, quiet_third_party

__all__ = ["configure_logging", "quiet_third_party"]
