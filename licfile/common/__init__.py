# Common utilities
from licfile.common.crypto import CryptoUtils as CryptoUtils
from licfile.common.logging_utils import get_logger as get_logger

__all__ = ["CryptoUtils", "get_logger"]
