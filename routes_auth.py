# routes_auth.py
from flask import Blueprint, request, jsonify, current_app
from werkzeug.security import check_password_hash

from models_auth import Cuenta
from auth_guard import (encode_session, resolve_session, session_claims,
                        set_session_cookie, clear_session_cookie)

bp_auth = Blueprint("auth", __name__)


@bp_auth.post("/auth/login")
def login():
    data = request.get_json(silent=True) or {}
    usuario = (data.get("usuario") or "").strip()
    contrasena = data.get("contrasena") or ""
    if not usuario or not contrasena:
        return jsonify(error="Usuario y contraseña son requeridos"), 400

    cuenta = Cuenta.query.filter_by(usuario=usuario).first()
    if not cuenta or not check_password_hash(cuenta.contrasena, contrasena):
        current_app.logger.info("[AUTH] login fallido usuario=%s", usuario)
        return jsonify(error="Usuario o contraseña incorrectos"), 401

    if cuenta.estado == "bloqueado":
        current_app.logger.info("[AUTH] login de cuenta bloqueada usuario=%s", usuario)
        return jsonify(error="Su cuenta está bloqueada. Contacte al administrador."), 403

    token = encode_session(cuenta)
    claims = session_claims(cuenta.to_dict())
    resp = jsonify(success=True, usuario=claims)
    current_app.logger.info("[AUTH] login ok usuario=%s tipo=%s", cuenta.usuario, cuenta.tipousuario)
    return set_session_cookie(resp, token)


@bp_auth.get("/auth/me")
def me():
    sesion = resolve_session()
    if not sesion:
        return jsonify(authenticated=False, error="No hay sesión activa"), 401
    return jsonify(authenticated=True, usuario=sesion)


@bp_auth.post("/auth/logout")
def logout():
    return clear_session_cookie(jsonify(success=True))
