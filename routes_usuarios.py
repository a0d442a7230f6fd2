# routes_usuarios.py: usuarios finales del bot: aprobación y asignación
from flask import Blueprint, request, jsonify, current_app, g
from werkzeug.security import generate_password_hash

from extensions import db
from models_usuarios import UsuarioSistema
from auth_guard import require_module, scope_filter
from utils import to_bool, apply_patch

bp_usuarios = Blueprint("usuarios", __name__)

CAMPOS = ("nombre", "telefono", "cuenta", "proceso", "aprobar", "asignacion")


def _asignacion(v):
    return "activar" if to_bool(v) else "desactivar"


def _get(usuario_id):
    return UsuarioSistema.query.filter(UsuarioSistema.id == usuario_id,
                                       scope_filter(g.sesion, UsuarioSistema.telefonocaso)).first()


@bp_usuarios.get("/usuarios")
@require_module("usuarios")
def list_usuarios():
    rows = (UsuarioSistema.query
            .filter(scope_filter(g.sesion, UsuarioSistema.telefonocaso))
            .order_by(UsuarioSistema.id.desc())
            .all())
    return jsonify([u.to_dict() for u in rows])


@bp_usuarios.get("/usuarios/<int:usuario_id>")
@require_module("usuarios")
def get_usuario(usuario_id: int):
    u = _get(usuario_id)
    if not u:
        return jsonify(error="Usuario no encontrado"), 404
    return jsonify(u.to_dict())


@bp_usuarios.put("/usuarios/<int:usuario_id>")
@require_module("usuarios")
def update_usuario(usuario_id: int):
    data = request.get_json(silent=True) or {}
    u = _get(usuario_id)
    if not u:
        return jsonify(error="Usuario no encontrado"), 404
    try:
        cambios = apply_patch(u, data, CAMPOS,
                              convertir={"aprobar": to_bool, "asignacion": _asignacion})
    except ValueError as e:
        db.session.rollback()
        return jsonify(error=str(e)), 400
    if data.get("contrasena"):
        u.contrasena = generate_password_hash(data["contrasena"])
        cambios.append("contrasena")
    if not cambios:
        return jsonify(error="No hay campos para actualizar"), 400
    db.session.commit()
    current_app.logger.info("[USUARIOS] id=%s actualizado (%s)", u.id, ",".join(cambios))
    return jsonify(success=True, usuario=u.to_dict())


@bp_usuarios.put("/usuarios")
@require_module("usuarios")
def bulk_update_usuarios():
    data = request.get_json(silent=True) or {}
    ids = data.get("ids")
    if not isinstance(ids, list) or not ids or not all(isinstance(i, int) for i in ids):
        return jsonify(error="Se requiere un array de IDs"), 400
    campo = data.get("campo")
    if campo not in ("aprobar", "asignacion"):
        return jsonify(error="Campo invalido. Debe ser 'aprobar' o 'asignacion'"), 400
    try:
        valor = to_bool(data.get("valor")) if campo == "aprobar" else _asignacion(data.get("valor"))
    except ValueError as e:
        return jsonify(error=str(e)), 400

    n = (UsuarioSistema.query
         .filter(UsuarioSistema.id.in_(ids),
                 scope_filter(g.sesion, UsuarioSistema.telefonocaso))
         .update({getattr(UsuarioSistema, campo): valor}, synchronize_session=False))
    db.session.commit()
    current_app.logger.info("[USUARIOS] masivo %s=%s sobre %s/%s ids", campo, valor, n, len(ids))
    return jsonify(success=True, actualizados=n, message=f"{n} usuarios actualizados")
