import itertools

import pytest
from werkzeug.security import generate_password_hash

from app import create_app
from extensions import db
from models_auth import Cuenta, TIPO_ADMIN, TIPO_USUARIO
from auth_guard import COOKIE_NAME, encode_session

_seq = itertools.count(1)


@pytest.fixture
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{(tmp_path / 'test.db').as_posix()}",
        "SQLALCHEMY_ENGINE_OPTIONS": {},
        "CREATE_ALL": True,
        "UPLOAD_DIR": str(tmp_path / "uploads"),
        "LOG_DIR": str(tmp_path / "logs"),
        "PUBLIC_BASE_URL": "http://consola.test",
        "JWT_SECRET": "test-secret",
        "ADMIN_USER": "admin",
        "ADMIN_PASSWORD": "admin123",
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def crear_cuenta(app):
    """Crea una Cuenta y devuelve su id."""
    def _crear(tipousuario=TIPO_USUARIO, telefono=None, modulos=(), usuario=None,
               contrasena="secreto", estado="activo", nombre=None):
        n = next(_seq)
        with app.app_context():
            c = Cuenta(
                nombre=nombre or f"Cuenta {n}",
                tipousuario=tipousuario,
                usuario=usuario or f"user{n}",
                contrasena=generate_password_hash(contrasena),
                correo=f"user{n}@test.local",
                telefono=telefono,
                estado=estado,
                modulos=list(modulos),
            )
            db.session.add(c)
            db.session.commit()
            return c.id
    return _crear


@pytest.fixture
def cliente_como(app, crear_cuenta):
    """Test client con una sesión firmada para una cuenta nueva."""
    def _cliente(tipousuario=TIPO_USUARIO, telefono=None, modulos=(), **kw):
        cuenta_id = crear_cuenta(tipousuario=tipousuario, telefono=telefono, modulos=modulos, **kw)
        with app.app_context():
            token = encode_session(db.session.get(Cuenta, cuenta_id))
        c = app.test_client()
        c.set_cookie(COOKIE_NAME, token)
        c.cuenta_id = cuenta_id
        return c
    return _cliente


@pytest.fixture
def admin(cliente_como):
    return cliente_como(tipousuario=TIPO_ADMIN, telefono="999")


@pytest.fixture
def insertar(app):
    """Inserta filas directamente en la BD y devuelve sus ids."""
    def _insertar(*rows):
        with app.app_context():
            db.session.add_all(rows)
            db.session.commit()
            return [r.id for r in rows]
    return _insertar
