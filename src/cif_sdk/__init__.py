"""CIF SDK - Python client for the Collective Intelligence Framework API."""

import logging

__version__ = "0.1.0"
API_VERSION = 2

from .client import Client
from .config import ClientConfig
from .errors import (
    CIFError,
    ConfigError,
    DecodeError,
    RequestError,
    SubmissionError,
    TransportError,
)
from .results import Failure, Response, Success

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    "API_VERSION",
    "Client",
    "ClientConfig",
    "CIFError",
    "ConfigError",
    "DecodeError",
    "RequestError",
    "SubmissionError",
    "TransportError",
    "Success",
    "Failure",
    "Response",
]
