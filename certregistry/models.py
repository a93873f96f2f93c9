# certregistry/models.py
from datetime import datetime, timezone
from flask_sqlalchemy import SQLAlchemy
from werkzeug.security import generate_password_hash, check_password_hash

db = SQLAlchemy()


def utcnow():
    """Naive UTC timestamp, the form every DateTime column here stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _iso(value):
    return value.isoformat() if value else None


class Account(db.Model):
    __tablename__ = "accounts"
    id = db.Column(db.Integer, primary_key=True)
    address = db.Column(db.String(128), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)
    def set_password(self, password): self.password_hash = generate_password_hash(password)
    def check_password(self, password): return check_password_hash(self.password_hash, password)


class Institution(db.Model):
    __tablename__ = "institutions"
    address = db.Column(db.String(128), primary_key=True)
    name = db.Column(db.String(255), nullable=False, default="")
    email = db.Column(db.String(255), nullable=False, default="")
    authorized = db.Column(db.Boolean, nullable=False, default=False)
    registered_at = db.Column(db.DateTime, nullable=True)
    issued_count = db.Column(db.Integer, nullable=False, default=0)

    def to_dict(self):
        return {
            "address": self.address,
            "name": self.name,
            "email": self.email,
            "authorized": self.authorized,
            "registered_at": _iso(self.registered_at),
            "issued_count": self.issued_count,
        }


class Certificate(db.Model):
    __tablename__ = "certificates"
    # Allocated from RegistryState, never by the database.
    token_id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    recipient_name = db.Column(db.String(255), nullable=False)
    institution_name = db.Column(db.String(255), nullable=False)
    course_name = db.Column(db.String(255), nullable=False)
    grade = db.Column(db.String(100), nullable=False, default="")
    issue_date = db.Column(db.DateTime, nullable=False)
    completion_date = db.Column(db.DateTime, nullable=False)
    content_ref = db.Column(db.String(255), unique=True, nullable=False, index=True)
    is_valid = db.Column(db.Boolean, nullable=False, default=True)
    issuer = db.Column(db.String(128), nullable=False, index=True)
    cert_type = db.Column(db.String(100), nullable=False, default="")
    ownership = db.relationship("TokenOwnership", uselist=False, backref="certificate", lazy="joined")

    def to_dict(self):
        return {
            "token_id": self.token_id,
            "holder": self.ownership.holder if self.ownership else None,
            "recipient_name": self.recipient_name,
            "institution_name": self.institution_name,
            "course_name": self.course_name,
            "grade": self.grade,
            "issue_date": _iso(self.issue_date),
            "completion_date": _iso(self.completion_date),
            "content_ref": self.content_ref,
            "is_valid": self.is_valid,
            "issuer": self.issuer,
            "cert_type": self.cert_type,
        }

    @staticmethod
    def empty_dict():
        """The default-valued record returned when a lookup finds nothing."""
        return {
            "token_id": 0,
            "holder": None,
            "recipient_name": "",
            "institution_name": "",
            "course_name": "",
            "grade": "",
            "issue_date": None,
            "completion_date": None,
            "content_ref": "",
            "is_valid": False,
            "issuer": None,
            "cert_type": "",
        }


class TokenOwnership(db.Model):
    __tablename__ = "token_ownership"
    token_id = db.Column(db.Integer, db.ForeignKey("certificates.token_id"), primary_key=True)
    holder = db.Column(db.String(128), nullable=False, index=True)
    minted_at = db.Column(db.DateTime, nullable=False, default=utcnow)


class HolderEntry(db.Model):
    __tablename__ = "holder_index"
    __table_args__ = (db.UniqueConstraint("holder", "position", name="uq_holder_position"),)
    id = db.Column(db.Integer, primary_key=True)
    holder = db.Column(db.String(128), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False)
    token_id = db.Column(db.Integer, db.ForeignKey("certificates.token_id"), nullable=False)
    certificate = db.relationship("Certificate")


class RegistryState(db.Model):
    __tablename__ = "registry_state"
    id = db.Column(db.Integer, primary_key=True)
    total_minted = db.Column(db.Integer, nullable=False, default=0)


class RegistryEvent(db.Model):
    __tablename__ = "registry_events"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), nullable=False, index=True)
    token_id = db.Column(db.Integer, nullable=True, index=True)
    account = db.Column(db.String(128), nullable=True, index=True)
    actor = db.Column(db.String(128), nullable=True, index=True)
    payload = db.Column(db.JSON, nullable=False, default=dict)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "token_id": self.token_id,
            "account": self.account,
            "actor": self.actor,
            "payload": self.payload,
            "created_at": _iso(self.created_at),
        }


class TokenBlocklist(db.Model): __tablename__ = "token_blocklist"; id = db.Column(db.Integer, primary_key=True); jti = db.Column(db.String(36), nullable=False, index=True); created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
