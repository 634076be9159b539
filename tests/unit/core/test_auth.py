# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Tests for service instance authentication settings."""

import unittest

from azure.core.credentials import AzureNamedKeyCredential

from ServiceBroker.Xml.core.auth import ServiceAuthentication


class TestServiceAuthentication(unittest.TestCase):
    def test_absent_credentials_do_not_raise(self):
        auth = ServiceAuthentication()
        self.assertIsNone(auth.credential)
        self.assertIsNone(auth.username)
        self.assertIsNone(auth.password)

    def test_from_username_password(self):
        auth = ServiceAuthentication.from_username_password("svc", "secret")
        self.assertIsInstance(auth.credential, AzureNamedKeyCredential)
        self.assertEqual(auth.username, "svc")
        self.assertEqual(auth.password, "secret")

    def test_update_rotates_existing_credential(self):
        credential = AzureNamedKeyCredential("svc", "old")
        auth = ServiceAuthentication(credential)
        auth.update("svc", "new")
        self.assertIs(auth.credential, credential)
        self.assertEqual(auth.password, "new")

    def test_update_sets_missing_credential(self):
        auth = ServiceAuthentication()
        auth.update("svc", "secret")
        self.assertEqual(auth.username, "svc")

    def test_rejects_other_credential_types(self):
        with self.assertRaises(TypeError):
            ServiceAuthentication(("svc", "secret"))
