import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")

from decimal import Decimal

import pytest
from sqlalchemy import select

from database import UnitOfWork, build_engine, build_session_factory
from models import Base, Blog, Purchase, Wallet, Transaction
from services.errors import PaymentGatewayUnavailable
from services.gateway import GatewayOrder
from services.payments_service import PaymentsService
from services.signature import compute_signature

KEY_ID = "rzp_test_public"
KEY_SECRET = "rzp_test_secret"
BUYER = "buyer-1"
AUTHOR = "author-1"
BLOG_ID = "blog-1"


class FakeGateway:
    is_configured = True

    def __init__(self):
        self.calls = []
        self.fail = False

    def create_order(self, amount, currency, receipt, notes):
        if self.fail:
            raise PaymentGatewayUnavailable("Payment gateway unavailable, please retry")
        order = GatewayOrder(id=f"order_{len(self.calls) + 1:04d}", amount=amount, currency=currency)
        self.calls.append({"amount": amount, "currency": currency, "receipt": receipt, "notes": notes})
        return order


class RecordingNotifier:

    def __init__(self):
        self.events = []
        self.fail = False

    def publish(self, event, payload):
        if self.fail:
            raise RuntimeError("notification backend down")
        self.events.append((event, payload))


def sign(order_id, payment_id, secret=KEY_SECRET):
    return compute_signature(order_id, payment_id, secret)


@pytest.fixture
def engine(tmp_path):
    eng = build_engine(f"sqlite:///{tmp_path / 'payments.db'}", echo=False)
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def uow(session_factory):
    return UnitOfWork(session_factory)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def fee():
    """Mutable fee setting; tests change fee['percent'] to simulate config changes."""
    return {"percent": Decimal("30"), "reads": 0}


@pytest.fixture
def service(uow, gateway, notifier, fee):
    def fee_provider():
        fee["reads"] += 1
        return fee["percent"]

    return PaymentsService(
        uow=uow,
        gateway=gateway,
        notifier=notifier,
        key_id=KEY_ID,
        key_secret=KEY_SECRET,
        currency="INR",
        platform_wallet_owner_id="platform",
        fee_percent_provider=fee_provider,
    )


@pytest.fixture
def blog(session_factory):
    """Exclusive post priced at 100 rupees (10000 paise)."""
    with session_factory() as db:
        db.add(Blog(id=BLOG_ID, author_id=AUTHOR, title="Future of AI", slug="future-of-ai", is_exclusive=True, price=100))
        db.commit()
    return BLOG_ID


@pytest.fixture
def db(session_factory):
    """Session for assertions against committed state."""
    session = session_factory()
    yield session
    session.close()


def purchases_for(db, buyer_id=BUYER, item_id=BLOG_ID):
    db.expire_all()
    return db.execute(
        select(Purchase).where(Purchase.buyer_id == buyer_id, Purchase.item_id == item_id)
    ).scalars().all()


def wallet_for(db, owner_id):
    db.expire_all()
    return db.execute(select(Wallet).where(Wallet.owner_id == owner_id)).scalar_one_or_none()


def all_transactions(db):
    db.expire_all()
    return db.execute(select(Transaction)).scalars().all()
