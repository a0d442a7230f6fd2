# routes_necesidades.py: necesidades (intenciones) del bot (módulo "necesidades")
from flask import Blueprint, request, jsonify, current_app, g

from extensions import db
from models_chatbot import Necesidad, Pregunta
from auth_guard import require_module, scope_filter, tenant_key_for_write, es_admin
from utils import texto, to_bool, apply_patch

bp_necesidades = Blueprint("necesidades", __name__)

CAMPOS = ("categoria", "necesidad", "descripcion", "habilitado", "controlhumano")
REQUERIDOS = ("categoria", "necesidad", "habilitado", "controlhumano")
BOOLS = {"habilitado": to_bool, "controlhumano": to_bool}


def _get(necesidad_id):
    return Necesidad.query.filter(Necesidad.id == necesidad_id,
                                  scope_filter(g.sesion, Necesidad.telefonocaso)).first()


@bp_necesidades.get("/necesidades")
@require_module("necesidades")
def list_necesidades():
    q = Necesidad.query.filter(scope_filter(g.sesion, Necesidad.telefonocaso))
    categoria = texto(request.args.get("categoria"))
    if categoria:
        q = q.filter(Necesidad.categoria == categoria)
    rows = q.order_by(Necesidad.categoria.asc(), Necesidad.necesidad.asc()).all()
    return jsonify([n.to_dict() for n in rows])


@bp_necesidades.get("/necesidades/<int:necesidad_id>")
@require_module("necesidades")
def get_necesidad(necesidad_id: int):
    n = _get(necesidad_id)
    if not n:
        return jsonify(error="Necesidad no encontrada"), 404
    return jsonify(n.to_dict())


@bp_necesidades.post("/necesidades")
@require_module("necesidades")
def create_necesidad():
    data = request.get_json(silent=True) or {}
    categoria = texto(data.get("categoria"))
    necesidad = texto(data.get("necesidad"))
    if not categoria or not necesidad:
        return jsonify(error="Categoría y necesidad son requeridos"), 400
    try:
        tel = tenant_key_for_write(g.sesion, data.get("telefonocaso"))
        habilitado = to_bool(data["habilitado"]) if data.get("habilitado") is not None else True
        controlhumano = to_bool(data["controlhumano"]) if data.get("controlhumano") is not None else False
    except ValueError as e:
        return jsonify(error=str(e)), 400

    n = Necesidad(
        telefonocaso=tel,
        categoria=categoria,
        necesidad=necesidad,
        descripcion=texto(data.get("descripcion")),
        habilitado=habilitado,
        controlhumano=controlhumano,
    )
    db.session.add(n)
    db.session.commit()
    current_app.logger.info("[NECESIDADES] creada id=%s %s/%s tenant=%s", n.id, categoria, necesidad, tel)
    return jsonify(n.to_dict()), 201


@bp_necesidades.put("/necesidades/<int:necesidad_id>")
@require_module("necesidades")
def update_necesidad(necesidad_id: int):
    data = request.get_json(silent=True) or {}
    n = _get(necesidad_id)
    if not n:
        return jsonify(error="Necesidad no encontrada"), 404

    antes = (n.telefonocaso, n.categoria, n.necesidad)
    campos = CAMPOS + ("telefonocaso",) if es_admin(g.sesion) else CAMPOS
    try:
        cambios = apply_patch(n, data, campos, requeridos=REQUERIDOS, convertir=BOOLS)
    except ValueError as e:
        db.session.rollback()
        return jsonify(error=str(e)), 400
    if not cambios:
        return jsonify(error="No hay campos para actualizar"), 400

    # las preguntas cuelgan de (telefonocaso, categoria, necesidad): se mueven con la necesidad
    despues = (n.telefonocaso, n.categoria, n.necesidad)
    movidas = 0
    if despues != antes:
        movidas = (Pregunta.query
                   .filter(Pregunta.telefonocaso == antes[0],
                           Pregunta.categoria == antes[1],
                           Pregunta.necesidad == antes[2])
                   .update({Pregunta.telefonocaso: despues[0],
                            Pregunta.categoria: despues[1],
                            Pregunta.necesidad: despues[2]},
                           synchronize_session=False))
    db.session.commit()
    current_app.logger.info("[NECESIDADES] id=%s actualizada (%s), preguntas movidas=%s",
                            n.id, ",".join(cambios), movidas)
    return jsonify(n.to_dict())


@bp_necesidades.delete("/necesidades/<int:necesidad_id>")
@require_module("necesidades")
def delete_necesidad(necesidad_id: int):
    n = _get(necesidad_id)
    if not n:
        return jsonify(error="Necesidad no encontrada"), 404
    db.session.delete(n)
    db.session.commit()
    current_app.logger.info("[NECESIDADES] eliminada id=%s", necesidad_id)
    return jsonify(success=True, message="Necesidad eliminada correctamente")
