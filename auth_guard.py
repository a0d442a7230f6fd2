# auth_guard.py: sesión firmada + permisos por módulo + filtro por tenant
#
# Cadena aplicada a las rutas:  require_session -> require_module(nombre) -> scope_filter(columna)
# El rol y el teléfono se leen SOLO de un JWT firmado; nunca del body ni de cabeceras.
from datetime import datetime, timedelta
from functools import wraps

import jwt
from flask import current_app, g, jsonify, request
from sqlalchemy import false, true

from extensions import db
from models_auth import Cuenta, TIPO_ADMIN

COOKIE_NAME = "session"
SESSION_FIELDS = ("id", "nombre", "tipousuario", "usuario", "correo", "telefono", "modulos")


# ---------- Token ----------
def encode_session(cuenta) -> str:
    now = datetime.utcnow()
    ttl = timedelta(hours=current_app.config["SESSION_TTL_HOURS"])
    payload = {
        "sub": f"cuenta:{cuenta.id}",
        "id": cuenta.id,
        "nombre": cuenta.nombre,
        "tipousuario": cuenta.tipousuario,
        "usuario": cuenta.usuario,
        "correo": cuenta.correo,
        "telefono": cuenta.telefono,
        "modulos": list(cuenta.modulos or []),
        "iat": now,
        "exp": now + ttl,
        "iss": "consola",
    }
    return jwt.encode(payload, current_app.config["JWT_SECRET"], algorithm="HS256")


def session_claims(payload: dict) -> dict:
    return {k: payload.get(k) for k in SESSION_FIELDS}


def resolve_session():
    """Cookie -> dict de sesión, o None si falta / firma inválida / expirada."""
    token = request.cookies.get(COOKIE_NAME)
    if not token:
        return None
    try:
        payload = jwt.decode(
            token,
            current_app.config["JWT_SECRET"],
            algorithms=["HS256"],
            options={"require": ["exp", "iat", "iss"]},
            issuer="consola",
        )
    except jwt.PyJWTError as e:
        current_app.logger.info("[AUTH] sesión rechazada: %s", e)
        return None
    sesion = session_claims(payload)
    if not isinstance(sesion.get("modulos"), list):
        sesion["modulos"] = []
    return sesion


def refresh_session(sesion):
    """Rol, teléfono y módulos vigentes de la cuenta; None si ya no existe o está bloqueada."""
    cuenta = db.session.get(Cuenta, sesion.get("id")) if sesion.get("id") else None
    if not cuenta or cuenta.estado == "bloqueado":
        current_app.logger.info("[AUTH] sesión de cuenta inexistente o bloqueada id=%s", sesion.get("id"))
        return None
    sesion.update(tipousuario=cuenta.tipousuario, telefono=cuenta.telefono,
                  modulos=list(cuenta.modulos or []))
    return sesion


def set_session_cookie(resp, token):
    resp.set_cookie(
        COOKIE_NAME, token,
        max_age=current_app.config["SESSION_TTL_HOURS"] * 3600,
        httponly=True,
        secure=current_app.config["SESSION_COOKIE_SECURE"],
        samesite="Lax",
        path="/",
    )
    return resp


def clear_session_cookie(resp):
    resp.delete_cookie(COOKIE_NAME, path="/", httponly=True, samesite="Lax")
    return resp


# ---------- Política ----------
def es_admin(sesion) -> bool:
    return bool(sesion) and sesion.get("tipousuario") == TIPO_ADMIN


def authorize(sesion, *modulos):
    """(permitido, motivo). Admin pasa siempre; el resto necesita alguno de `modulos`."""
    if not sesion:
        return False, "No hay sesión activa"
    if es_admin(sesion):
        return True, None
    propios = sesion.get("modulos") or []
    if any(m in propios for m in modulos):
        return True, None
    return False, f"No tiene acceso al módulo de {modulos[0]}" if modulos else "Acceso denegado"


def tenant_key(sesion):
    return (sesion or {}).get("telefono") or None


def scope_filter(sesion, column):
    """Cláusula AND para list/get/update/delete.

    Admin -> sin restricción. No admin -> column == telefono de la sesión.
    No admin sin teléfono -> ninguna fila.
    """
    if es_admin(sesion):
        return true()
    tel = tenant_key(sesion)
    if not tel:
        return false()
    return column == tel


def tenant_key_for_write(sesion, requested=None):
    """Teléfono de tenant con el que se crea una fila. ValueError si no hay ninguno válido."""
    if es_admin(sesion):
        tel = (str(requested).strip() if requested else None) or tenant_key(sesion)
        if not tel:
            raise ValueError("Indique el teléfono del tenant (telefonocaso)")
        return tel
    tel = tenant_key(sesion)
    if not tel:
        raise ValueError("La cuenta no tiene un teléfono asociado")
    return tel


# ---------- Decoradores ----------
def require_session(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        sesion = resolve_session()
        if not sesion:
            return jsonify(error="No hay sesión activa"), 401
        sesion = refresh_session(sesion)
        if not sesion:
            return jsonify(error="Sesión no válida"), 401
        g.sesion = sesion
        return f(*args, **kwargs)
    return wrapper


def require_module(*modulos):
    def deco(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            ok, motivo = authorize(g.sesion, *modulos)
            if not ok:
                current_app.logger.info("[AUTH] %s denegado a %s: %s",
                                        request.path, g.sesion.get("usuario"), motivo)
                return jsonify(error=motivo), 403
            return f(*args, **kwargs)
        return require_session(wrapper)
    return deco


def require_admin(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if not es_admin(g.sesion):
            return jsonify(error="No tiene permisos de administrador"), 403
        return f(*args, **kwargs)
    return require_session(wrapper)
