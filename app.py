# app.py: Consola administrativa del chatbot (cuentas + preguntas + tarifas + bancos + clubes + uploads)
import os, logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException
from werkzeug.security import generate_password_hash

from extensions import db

BASE_DIR = Path(__file__).resolve().parent
DEFAULT_DB = f"sqlite:///{(BASE_DIR / 'consola.db').as_posix()}"

SQLALCHEMY_DATABASE_URI = DEFAULT_DB
_raw_db = os.environ.get("DATABASE_URL")
if _raw_db:
    if _raw_db.startswith("postgres://"):
        _raw_db = _raw_db.replace("postgres://", "postgresql+psycopg2://", 1)
    elif _raw_db.startswith("postgresql://"):
        _raw_db = _raw_db.replace("postgresql://", "postgresql+psycopg2://", 1)
    if "sslmode=" not in _raw_db and "+psycopg2://" in _raw_db:
        _raw_db += ("&" if "?" in _raw_db else "?") + "sslmode=require"
    SQLALCHEMY_DATABASE_URI = _raw_db

ENGINE_OPTIONS = {"pool_pre_ping": True, "pool_recycle": 300}

# Catálogo base de módulos (nombre, categoría)
MODULOS_BASE = [
    ("conversaciones", "Chatbot"),
    ("preguntas", "Chatbot"),
    ("necesidades", "Chatbot"),
    ("usuarios", "Chatbot"),
    ("tarifas", "Operacion"),
    ("bancos", "Operacion"),
    ("clubes", "Operacion"),
    ("formularios", "Operacion"),
]


def _env_bool(name, default="false"):
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes"}


def create_app(test_config=None):
    app = Flask(__name__)
    Path(app.instance_path).mkdir(parents=True, exist_ok=True)

    app.config.update(
        SQLALCHEMY_DATABASE_URI=SQLALCHEMY_DATABASE_URI,
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        SQLALCHEMY_ENGINE_OPTIONS=ENGINE_OPTIONS,
        MAX_CONTENT_LENGTH=int(os.getenv("MAX_CONTENT_LENGTH", str(55 * 1024 * 1024))),
        JWT_SECRET=os.getenv("JWT_SECRET", "consola-dev-secret"),
        SESSION_TTL_HOURS=int(os.getenv("SESSION_TTL_HOURS", "24")),
        SESSION_COOKIE_SECURE=_env_bool("SESSION_COOKIE_SECURE"),
        PUBLIC_BASE_URL=os.getenv("PUBLIC_BASE_URL", "http://localhost:10000").rstrip("/"),
        UPLOAD_DIR=os.getenv("UPLOAD_DIR", str(Path(app.instance_path, "uploads"))),
        LOG_DIR=os.getenv("LOG_DIR", str(BASE_DIR / "logs")),
        WEBHOOK_TIMEOUT=int(os.getenv("WEBHOOK_TIMEOUT", "15")),
        CORS_ORIGINS=[o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",") if o.strip()],
        CREATE_ALL=_env_bool("CONSOLA_CREATE_ALL"),
        ADMIN_USER=os.getenv("ADMIN_USER", ""),
        ADMIN_PASSWORD=os.getenv("ADMIN_PASSWORD", ""),
    )
    if test_config:
        app.config.update(test_config)

    Path(app.config["UPLOAD_DIR"]).mkdir(parents=True, exist_ok=True)

    db.init_app(app)
    CORS(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}}, supports_credentials=True)
    _init_logging(app)
    _register_errors(app)
    _register_headers(app)

    # ---------- Blueprints ----------
    from routes_auth import bp_auth
    from routes_cuentas import bp_cuentas
    from routes_bancos import bp_bancos
    from routes_clubes import bp_clubes
    from routes_tarifas import bp_tarifas
    from routes_necesidades import bp_necesidades
    from routes_preguntas import bp_preguntas
    from routes_conversaciones import bp_conversaciones
    from routes_upload import bp_upload
    from routes_formularios import bp_formularios
    from routes_usuarios import bp_usuarios

    for bp in (bp_auth, bp_cuentas, bp_bancos, bp_clubes, bp_tarifas, bp_necesidades,
               bp_preguntas, bp_conversaciones, bp_upload, bp_formularios, bp_usuarios):
        app.register_blueprint(bp, url_prefix="/api")

    if app.config["CREATE_ALL"]:
        with app.app_context():
            db.create_all()
            _seed(app)

    # ---------- Health ----------
    @app.get("/health")
    @app.get("/healthz")
    def health():
        return jsonify(ok=True, service="consola-chatbot")

    return app


def _seed(app):
    """Catálogo de módulos y administrador inicial (si ADMIN_USER/ADMIN_PASSWORD)."""
    from models_auth import Cuenta, Modulo, TIPO_ADMIN

    if not Modulo.query.first():
        for nombre, categoria in MODULOS_BASE:
            db.session.add(Modulo(nombre=nombre, categoria=categoria))
        app.logger.info("[SEED] %d módulos creados", len(MODULOS_BASE))

    usuario = app.config.get("ADMIN_USER")
    clave = app.config.get("ADMIN_PASSWORD")
    if usuario and clave and not Cuenta.query.filter_by(usuario=usuario).first():
        db.session.add(Cuenta(
            nombre="Administrador",
            tipousuario=TIPO_ADMIN,
            usuario=usuario,
            contrasena=generate_password_hash(clave),
            estado="activo",
            modulos=[],
        ))
        app.logger.info("[SEED] administrador inicial '%s' creado", usuario)
    db.session.commit()


def _register_errors(app):
    @app.errorhandler(HTTPException)
    def _http_error(e):
        return jsonify(error=e.description or e.name), e.code

    @app.errorhandler(Exception)
    def _unhandled(e):
        db.session.rollback()
        app.logger.exception("Error no controlado: %s", e)
        return jsonify(error="Error interno del servidor"), 500


def _register_headers(app):
    @app.after_request
    def _secure_headers(resp):
        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        resp.headers.setdefault("X-Frame-Options", "DENY")
        resp.headers.setdefault("Referrer-Policy", "no-referrer")
        return resp


def _init_logging(app):
    app.logger.setLevel(logging.INFO)
    for h in list(app.logger.handlers):
        app.logger.removeHandler(h); h.close()
    fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    sh = logging.StreamHandler(); sh.setFormatter(fmt); app.logger.addHandler(sh)
    logs_dir = Path(app.config["LOG_DIR"])
    try:
        logs_dir.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(logs_dir / "consola.log", maxBytes=5_000_000, backupCount=3, encoding="utf-8")
        fh.setFormatter(fmt); app.logger.addHandler(fh)
    except OSError as e:
        app.logger.warning("Sin log en fichero (%s): %s", logs_dir, e)
    app.logger.info("Logging listo")


if __name__ == "__main__":
    app = create_app()
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "10000")), debug=True)
