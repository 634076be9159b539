# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Core infrastructure components for the XML service broker.

This module contains the foundational components including configuration,
authentication settings, error types, result wrappers, telemetry and
transaction acknowledgment.
"""

from .results import (
    OperationMetadata,
    BrokerResponse,
    OperationResult,
)

__all__ = [
    "OperationMetadata",
    "BrokerResponse",
    "OperationResult",
]
