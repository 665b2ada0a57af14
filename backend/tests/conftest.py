import os, sys, pytest
# Ensure backend directory is on path so 'tunnel_admin' can be imported without installing
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
from tunnel_admin import create_app, get_db
from tunnel_admin.models import Base  # registers every table on Base.metadata


@pytest.fixture(scope='session', autouse=True)
def app_instance():
    app = create_app({'DATABASE_URL': 'sqlite+pysqlite:///:memory:', 'TESTING': True})
    with app.app_context():
        engine = get_db().get_bind()
        Base.metadata.create_all(engine)
    yield app


@pytest.fixture()
def client(app_instance):
    return app_instance.test_client()


@pytest.fixture()
def session(app_instance):
    s = get_db()
    try:
        s.rollback()
    except Exception:
        pass
    return s
