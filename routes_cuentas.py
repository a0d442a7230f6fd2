# routes_cuentas.py: cuentas de la consola (solo admin) y catálogo de módulos
from flask import Blueprint, request, jsonify, current_app, g
from sqlalchemy.exc import IntegrityError
from werkzeug.security import generate_password_hash

from extensions import db
from models_auth import Cuenta, Modulo, TIPOS_USUARIO, ESTADOS_CUENTA
from auth_guard import require_admin, require_session
from utils import texto

bp_cuentas = Blueprint("cuentas", __name__)


def _modulos(v):
    if not isinstance(v, list) or not all(isinstance(m, str) for m in v):
        raise ValueError("modulos debe ser una lista de nombres")
    # sin duplicados, conservando el orden
    return list(dict.fromkeys(m.strip() for m in v if m.strip()))


def _conflicto(cuenta_id, usuario, correo, telefono):
    """Mensaje del campo único que choca con otra cuenta (tras un IntegrityError)."""
    otras = Cuenta.query.filter(Cuenta.id != cuenta_id) if cuenta_id else Cuenta.query
    if usuario and otras.filter(Cuenta.usuario == usuario).first():
        return "El nombre de usuario ya existe"
    if correo and otras.filter(Cuenta.correo == correo).first():
        return "El correo electronico ya esta registrado"
    if telefono and otras.filter(Cuenta.telefono == telefono).first():
        return "El telefono ya esta registrado"
    return "La cuenta entra en conflicto con otra existente"


def _guardar(cuenta):
    """flush + commit; None si ok, mensaje de conflicto si viola un UNIQUE."""
    # el rollback expira la fila: valores tomados antes
    valores = (cuenta.id, cuenta.usuario, cuenta.correo, cuenta.telefono)
    try:
        db.session.flush()
        db.session.commit()
        return None
    except IntegrityError:
        db.session.rollback()
        return _conflicto(*valores)


@bp_cuentas.get("/cuentas")
@require_admin
def list_cuentas():
    rows = Cuenta.query.order_by(Cuenta.nombre.asc(), Cuenta.id.asc()).all()
    return jsonify([c.to_dict() for c in rows])


@bp_cuentas.post("/cuentas")
@require_admin
def create_cuenta():
    data = request.get_json(silent=True) or {}
    usuario = texto(data.get("usuario"))
    contrasena = data.get("contrasena") or ""
    tipousuario = texto(data.get("tipousuario"))
    if not usuario or not contrasena or not tipousuario:
        return jsonify(error="Usuario, contraseña y tipo de usuario son requeridos"), 400
    if tipousuario not in TIPOS_USUARIO:
        return jsonify(error="Tipo de usuario inválido"), 400
    estado = texto(data.get("estado")) or "activo"
    if estado not in ESTADOS_CUENTA:
        return jsonify(error="Estado inválido"), 400
    try:
        modulos = _modulos(data.get("modulos") or [])
    except ValueError as e:
        return jsonify(error=str(e)), 400

    cuenta = Cuenta(
        nombre=texto(data.get("nombre")),
        tipousuario=tipousuario,
        usuario=usuario,
        contrasena=generate_password_hash(contrasena),
        correo=texto(data.get("correo")),
        telefono=texto(data.get("telefono")),
        estado=estado,
        modulos=modulos,
    )
    db.session.add(cuenta)
    error = _guardar(cuenta)
    if error:
        return jsonify(error=error), 400
    current_app.logger.info("[CUENTAS] creada id=%s usuario=%s por %s", cuenta.id, cuenta.usuario, g.sesion["usuario"])
    return jsonify(cuenta.to_dict()), 201


@bp_cuentas.get("/cuentas/<int:cuenta_id>")
@require_admin
def get_cuenta(cuenta_id: int):
    cuenta = db.session.get(Cuenta, cuenta_id)
    if not cuenta:
        return jsonify(error="Cuenta no encontrada"), 404
    return jsonify(cuenta.to_dict())


@bp_cuentas.put("/cuentas/<int:cuenta_id>")
@require_admin
def update_cuenta(cuenta_id: int):
    data = request.get_json(silent=True) or {}
    cuenta = db.session.get(Cuenta, cuenta_id)
    if not cuenta:
        return jsonify(error="Cuenta no encontrada"), 404

    cambios = []
    if "nombre" in data:
        cuenta.nombre = texto(data.get("nombre")); cambios.append("nombre")
    if "tipousuario" in data:
        if data.get("tipousuario") not in TIPOS_USUARIO:
            return jsonify(error="Tipo de usuario inválido"), 400
        cuenta.tipousuario = data["tipousuario"]; cambios.append("tipousuario")
    if "usuario" in data:
        usuario = texto(data.get("usuario"))
        if not usuario:
            return jsonify(error="El usuario no puede quedar vacío"), 400
        cuenta.usuario = usuario; cambios.append("usuario")
    if data.get("contrasena"):
        cuenta.contrasena = generate_password_hash(data["contrasena"]); cambios.append("contrasena")
    if "correo" in data:
        cuenta.correo = texto(data.get("correo")); cambios.append("correo")
    if "telefono" in data:
        cuenta.telefono = texto(data.get("telefono")); cambios.append("telefono")
    if "estado" in data:
        if data.get("estado") not in ESTADOS_CUENTA:
            return jsonify(error="Estado inválido"), 400
        cuenta.estado = data["estado"]; cambios.append("estado")
    if "modulos" in data:
        try:
            cuenta.modulos = _modulos(data.get("modulos") or [])
        except ValueError as e:
            return jsonify(error=str(e)), 400
        cambios.append("modulos")

    if not cambios:
        return jsonify(error="No hay campos para actualizar"), 400

    error = _guardar(cuenta)
    if error:
        return jsonify(error=error), 400
    current_app.logger.info("[CUENTAS] id=%s actualizada (%s)", cuenta.id, ",".join(cambios))
    return jsonify(cuenta.to_dict())


@bp_cuentas.delete("/cuentas/<int:cuenta_id>")
@require_admin
def delete_cuenta(cuenta_id: int):
    if g.sesion.get("id") == cuenta_id:
        return jsonify(error="No puede eliminar su propia cuenta"), 400
    cuenta = db.session.get(Cuenta, cuenta_id)
    if not cuenta:
        return jsonify(error="Cuenta no encontrada"), 404
    db.session.delete(cuenta)
    db.session.commit()
    current_app.logger.info("[CUENTAS] eliminada id=%s por %s", cuenta_id, g.sesion["usuario"])
    return jsonify(success=True, id=cuenta_id)


# ---------- Catálogo de módulos ----------
@bp_cuentas.get("/modulos")
@require_session
def list_modulos():
    rows = Modulo.query.order_by(Modulo.categoria.asc(), Modulo.nombre.asc()).all()
    return jsonify([m.to_dict() for m in rows])
