# routes_bancos.py: cuentas bancarias por tenant (módulo "bancos")
from flask import Blueprint, request, jsonify, current_app, g
from sqlalchemy.exc import IntegrityError

from extensions import db
from models_bancos import Banco
from auth_guard import require_module, scope_filter, tenant_key_for_write
from utils import texto, like

bp_bancos = Blueprint("bancos", __name__)

REQUERIDOS = (
    ("nombre", "El nombre del banco es requerido"),
    ("numerocuenta", "El número de cuenta es requerido"),
    ("tipocuenta", "El tipo de cuenta es requerido"),
    ("identificacion", "La identificación es requerida"),
)
CONFLICTO = "Ya existe otro banco con ese número de cuenta"


def _get(banco_id):
    return Banco.query.filter(Banco.id == banco_id,
                              scope_filter(g.sesion, Banco.telefonocaso)).first()


def _validar(data):
    """dict limpio o (None, mensaje)."""
    limpio = {}
    for campo, msg in REQUERIDOS:
        v = texto(data.get(campo))
        if not v:
            return None, msg
        limpio[campo] = v
    limpio["correo"] = texto(data.get("correo"))
    limpio["telefono"] = texto(data.get("telefono"))
    return limpio, None


@bp_bancos.get("/bancos")
@require_module("bancos")
def list_bancos():
    q = Banco.query.filter(scope_filter(g.sesion, Banco.telefonocaso))
    nombre = texto(request.args.get("nombre"))
    if nombre:
        q = q.filter(Banco.nombre.ilike(like(nombre)))
    rows = q.order_by(Banco.nombre.asc(), Banco.id.asc()).all()
    return jsonify([b.to_dict() for b in rows])


@bp_bancos.get("/bancos/<int:banco_id>")
@require_module("bancos")
def get_banco(banco_id: int):
    banco = _get(banco_id)
    if not banco:
        return jsonify(error="Banco no encontrado"), 404
    return jsonify(banco.to_dict())


@bp_bancos.post("/bancos")
@require_module("bancos")
def create_banco():
    data = request.get_json(silent=True) or {}
    campos, error = _validar(data)
    if error:
        return jsonify(error=error), 400
    try:
        tel = tenant_key_for_write(g.sesion, data.get("telefonocaso"))
    except ValueError as e:
        return jsonify(error=str(e)), 400

    banco = Banco(telefonocaso=tel, **campos)
    db.session.add(banco)
    try:
        db.session.flush()
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify(error=CONFLICTO), 400
    current_app.logger.info("[BANCOS] creado id=%s tenant=%s", banco.id, tel)
    return jsonify(banco.to_dict()), 201


@bp_bancos.put("/bancos/<int:banco_id>")
@require_module("bancos")
def update_banco(banco_id: int):
    data = request.get_json(silent=True) or {}
    campos, error = _validar(data)
    if error:
        return jsonify(error=error), 400
    banco = _get(banco_id)
    if not banco:
        return jsonify(error="Banco no encontrado"), 404

    for k, v in campos.items():
        setattr(banco, k, v)
    try:
        db.session.flush()
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify(error=CONFLICTO), 400
    current_app.logger.info("[BANCOS] actualizado id=%s", banco.id)
    return jsonify(banco.to_dict())


@bp_bancos.delete("/bancos/<int:banco_id>")
@require_module("bancos")
def delete_banco(banco_id: int):
    banco = _get(banco_id)
    if not banco:
        return jsonify(error="Banco no encontrado"), 404
    db.session.delete(banco)
    db.session.commit()
    current_app.logger.info("[BANCOS] eliminado id=%s", banco_id)
    return jsonify(success=True, id=banco_id)
