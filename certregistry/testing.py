# testing.py
# Shared unittest scaffolding: a fresh in-memory registry per test.

import unittest
from datetime import date

from certregistry.app import create_app
from certregistry.models import db
from certregistry.services import directory, registry

ADMIN = "0xadmin"
INSTITUTION_A = "0xaaaa000000000000000000000000000000000001"
INSTITUTION_B = "0xbbbb000000000000000000000000000000000002"
RECIPIENT = "0xcccc000000000000000000000000000000000003"
OTHER_RECIPIENT = "0xdddd000000000000000000000000000000000004"


class RegistryTestCase(unittest.TestCase):

    def setUp(self):
        self.app = create_app('testing')
        self.ctx = self.app.app_context()
        self.ctx.push()
        db.create_all()

    def tearDown(self):
        db.session.remove()
        db.drop_all()
        self.ctx.pop()

    def register(self, address=INSTITUTION_A, name="Institution A", email="registrar@a.edu"):
        return directory.register_institution(address, name, email)

    def issue(self, caller=INSTITUTION_A, recipient=RECIPIENT, content_ref="Qm123", **overrides):
        fields = {
            "recipient_name": "Priya Sharma",
            "course_name": "Computer Science",
            "grade": "A",
            "completion_date": date(2024, 6, 1),
            "cert_type": "Degree",
        }
        fields.update(overrides)
        return registry.issue_certificate(
            caller, recipient, fields["recipient_name"], fields["course_name"], fields["grade"],
            content_ref, fields["completion_date"], fields["cert_type"],
        )
