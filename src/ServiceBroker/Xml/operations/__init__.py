# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Operation namespace classes for the XML service broker.

This module contains the operation namespace classes that organize
related operations under intuitive namespaces:
- SchemaOperations: Schema discovery and service object lookup
- QueryOperations: List and Read invocations
"""

__all__ = []
