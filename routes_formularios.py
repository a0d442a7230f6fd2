# routes_formularios.py: solicitudes de depósito/retiro recibidas por el bot
from flask import Blueprint, request, jsonify, current_app, g
from sqlalchemy import or_

from extensions import db
from models_formularios import Formulario
from auth_guard import require_module, scope_filter, tenant_key_for_write
from utils import texto, like, to_decimal

bp_formularios = Blueprint("formularios", __name__)

TEXTOS = ("nombre", "cuenta", "tiposolicitud", "cuentatransferencia", "guid",
          "club", "enlace", "urlimagen", "bancodeposito")


def _get(form_id):
    return Formulario.query.filter(Formulario.id == form_id,
                                   scope_filter(g.sesion, Formulario.telefonocaso)).first()


@bp_formularios.get("/formularios")
@require_module("formularios")
def list_formularios():
    q = Formulario.query.filter(scope_filter(g.sesion, Formulario.telefonocaso))
    busqueda = texto(request.args.get("busqueda"))
    if busqueda:
        patron = like(busqueda)
        q = q.filter(or_(Formulario.telefono.ilike(patron),
                         Formulario.nombre.ilike(patron),
                         Formulario.cuenta.ilike(patron),
                         Formulario.club.ilike(patron)))
    tiposolicitud = texto(request.args.get("tiposolicitud"))
    if tiposolicitud:
        q = q.filter(Formulario.tiposolicitud == tiposolicitud)
    return jsonify([f.to_dict() for f in q.order_by(Formulario.id.desc()).all()])


@bp_formularios.get("/formularios/<int:form_id>")
@require_module("formularios")
def get_formulario(form_id: int):
    f = _get(form_id)
    if not f:
        return jsonify(error="Formulario no encontrado"), 404
    return jsonify(f.to_dict())


@bp_formularios.post("/formularios")
@require_module("formularios")
def create_formulario():
    data = request.get_json(silent=True) or {}
    telefono = texto(data.get("telefono"))
    if not telefono:
        return jsonify(error="El teléfono es requerido"), 400
    try:
        tel = tenant_key_for_write(g.sesion, data.get("telefonocaso"))
        fondos = data.get("cantidadfondos")
        fondos = to_decimal(fondos) if texto(fondos) is not None else None
    except ValueError as e:
        return jsonify(error=str(e)), 400

    f = Formulario(telefonocaso=tel, telefono=telefono, cantidadfondos=fondos,
                   datosconversion=data.get("datosconversion"),
                   **{k: texto(data.get(k)) for k in TEXTOS})
    db.session.add(f)
    db.session.commit()
    current_app.logger.info("[FORMULARIOS] creado id=%s tipo=%s tenant=%s", f.id, f.tiposolicitud, tel)
    return jsonify(f.to_dict()), 201


@bp_formularios.delete("/formularios/<int:form_id>")
@require_module("formularios")
def delete_formulario(form_id: int):
    f = _get(form_id)
    if not f:
        return jsonify(error="Formulario no encontrado"), 404
    db.session.delete(f)
    db.session.commit()
    current_app.logger.info("[FORMULARIOS] eliminado id=%s", form_id)
    return jsonify(success=True, id=form_id)
