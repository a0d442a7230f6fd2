# routes_tarifas.py: tarifas de transporte (módulo "tarifas")
from flask import Blueprint, request, jsonify, current_app, g
from sqlalchemy import func

from extensions import db
from models_tarifas import Tarifa
from auth_guard import require_module, scope_filter, tenant_key_for_write
from utils import texto, like, to_decimal, apply_patch

bp_tarifas = Blueprint("tarifas", __name__)

CAMPOS = ("origen", "destino", "ciudad_destino", "precio", "referencia")
REQUERIDOS = ("origen", "destino", "ciudad_destino", "precio")


def _get(tarifa_id):
    return Tarifa.query.filter(Tarifa.id == tarifa_id,
                               scope_filter(g.sesion, Tarifa.telefonocaso)).first()


@bp_tarifas.get("/tarifas")
@require_module("tarifas")
def list_tarifas():
    q = Tarifa.query.filter(scope_filter(g.sesion, Tarifa.telefonocaso))
    for param, col in (("origen", Tarifa.origen),
                       ("destino", Tarifa.destino),
                       ("ciudad", Tarifa.ciudad_destino)):
        v = texto(request.args.get(param))
        if v:
            q = q.filter(col.ilike(like(v)))
    rows = q.order_by(Tarifa.origen.asc(), Tarifa.ciudad_destino.asc(), Tarifa.precio.asc()).all()
    return jsonify([t.to_dict() for t in rows])


@bp_tarifas.get("/tarifas/<int:tarifa_id>")
@require_module("tarifas")
def get_tarifa(tarifa_id: int):
    t = _get(tarifa_id)
    if not t:
        return jsonify(error="Tarifa no encontrada"), 404
    return jsonify(t.to_dict())


@bp_tarifas.post("/tarifas")
@require_module("tarifas")
def create_tarifa():
    data = request.get_json(silent=True) or {}
    if any(texto(data.get(k)) is None for k in REQUERIDOS):
        return jsonify(error="Todos los campos son requeridos"), 400
    try:
        precio = to_decimal(data["precio"])
        tel = tenant_key_for_write(g.sesion, data.get("telefonocaso"))
    except ValueError as e:
        return jsonify(error=str(e)), 400

    t = Tarifa(
        telefonocaso=tel,
        origen=texto(data["origen"]),
        destino=texto(data["destino"]),
        ciudad_destino=texto(data["ciudad_destino"]),
        precio=precio,
        referencia=texto(data.get("referencia")),
    )
    db.session.add(t)
    db.session.commit()
    current_app.logger.info("[TARIFAS] creada id=%s tenant=%s", t.id, tel)
    return jsonify(t.to_dict()), 201


@bp_tarifas.put("/tarifas/<int:tarifa_id>")
@require_module("tarifas")
def update_tarifa(tarifa_id: int):
    data = request.get_json(silent=True) or {}
    t = _get(tarifa_id)
    if not t:
        return jsonify(error="Tarifa no encontrada"), 404
    try:
        cambios = apply_patch(t, data, CAMPOS, requeridos=REQUERIDOS,
                              convertir={"precio": to_decimal})
    except ValueError as e:
        db.session.rollback()
        return jsonify(error=str(e)), 400
    if not cambios:
        return jsonify(error="No hay campos para actualizar"), 400
    db.session.commit()
    current_app.logger.info("[TARIFAS] id=%s actualizada (%s)", t.id, ",".join(cambios))
    return jsonify(t.to_dict())


@bp_tarifas.delete("/tarifas/<int:tarifa_id>")
@require_module("tarifas")
def delete_tarifa(tarifa_id: int):
    t = _get(tarifa_id)
    if not t:
        return jsonify(error="Tarifa no encontrada"), 404
    db.session.delete(t)
    db.session.commit()
    current_app.logger.info("[TARIFAS] eliminada id=%s", tarifa_id)
    return jsonify(success=True, id=tarifa_id)


# ---------- Destinos ----------
@bp_tarifas.get("/tarifas/destinos")
@require_module("tarifas")
def list_destinos():
    rows = (
        db.session.query(
            Tarifa.destino,
            Tarifa.ciudad_destino,
            func.max(Tarifa.referencia).label("referencia"),
            func.count(Tarifa.id).label("cantidad"),
        )
        .filter(scope_filter(g.sesion, Tarifa.telefonocaso))
        .group_by(Tarifa.destino, Tarifa.ciudad_destino)
        .order_by(Tarifa.destino.asc())
        .all()
    )
    return jsonify([
        {"destino": r.destino, "ciudad_destino": r.ciudad_destino,
         "referencia": r.referencia, "cantidad": r.cantidad}
        for r in rows
    ])


@bp_tarifas.put("/tarifas/destinos/referencia")
@require_module("tarifas")
def set_referencia():
    data = request.get_json(silent=True) or {}
    destino = texto(data.get("destino"))
    if not destino:
        return jsonify(error="El destino es requerido"), 400
    referencia = texto(data.get("referencia"))

    n = (Tarifa.query
         .filter(Tarifa.destino == destino, scope_filter(g.sesion, Tarifa.telefonocaso))
         .update({Tarifa.referencia: referencia}, synchronize_session=False))
    db.session.commit()
    current_app.logger.info("[TARIFAS] referencia destino=%s -> %s (%s filas)", destino, referencia, n)
    return jsonify(success=True, actualizados=n,
                   message=f"Referencia actualizada en {n} tarifas")
