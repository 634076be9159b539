# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Shared constants for the XML service broker."""

__all__ = []
