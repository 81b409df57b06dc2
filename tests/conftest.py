import itertools
import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENV"] = "test"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from arthub import models  # noqa: E402,F401
from arthub.database import get_session  # noqa: E402
from arthub.main import app  # noqa: E402
from arthub.models.artwork import Artwork  # noqa: E402
from arthub.models.user import User  # noqa: E402
from arthub.services.payment_service import PaymentGatewayError, get_payment_gateway  # noqa: E402
from arthub.utils.hash import hash_password  # noqa: E402

from tests.helpers import GOOD_SIGNATURE, PASSWORD  # noqa: E402

PASSWORD_HASH = hash_password(PASSWORD)


class FakeGateway:
    """Stands in for the payment provider."""

    def __init__(self):
        self.sessions = []
        self.fail = False

    def create_checkout_session(self, *, order_id, amount, description, lines, customer_email=None):
        if self.fail:
            raise PaymentGatewayError("provider down")

        link_id = f"plink_{order_id}"
        self.sessions.append({
            "id": link_id,
            "order_id": order_id,
            "amount": amount,
            "description": description,
            "lines": lines,
            "customer_email": customer_email,
        })
        return {"id": link_id, "url": f"https://rzp.io/i/{link_id}"}

    def verify_webhook(self, body, signature):
        return signature == GOOD_SIGNATURE


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def client(session, gateway):
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_payment_gateway] = lambda: gateway

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session):
    counter = itertools.count(1)

    def _make(role="community", **fields):
        n = next(counter)
        fields.setdefault("name", f"{role.title()} {n}")
        fields.setdefault("email", f"{role}{n}@example.com")
        user = User(password=PASSWORD_HASH, role=role, **fields)
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make


@pytest.fixture
def make_artwork(session):
    counter = itertools.count(1)

    def _make(artist, **fields):
        n = next(counter)
        fields.setdefault("title", f"Artwork {n}")
        fields.setdefault("description", "Oil on canvas, signed by the artist.")
        fields.setdefault("price", 100.0)
        fields.setdefault("category", "Painting")
        fields.setdefault("medium", "Oil")
        fields.setdefault("dimensions", "50x70 cm")
        fields.setdefault("images", ["https://example.com/art.jpg"])
        artwork = Artwork(artist_id=artist.id, **fields)
        session.add(artwork)
        session.commit()
        session.refresh(artwork)
        return artwork

    return _make


@pytest.fixture
def artist(make_user):
    return make_user("artist", name="Frida Artist")


@pytest.fixture
def buyer(make_user):
    return make_user("community", name="Bob Buyer")


@pytest.fixture
def admin(make_user):
    return make_user("admin", name="Ada Admin")


