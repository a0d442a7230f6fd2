# routes_preguntas.py: preguntas frecuentes del bot con su respuesta y multimedia
from flask import Blueprint, request, jsonify, current_app, g
from sqlalchemy import or_

from extensions import db
from models_auth import Cuenta
from models_chatbot import Pregunta
from auth_guard import require_module, scope_filter, tenant_key_for_write, es_admin
from utils import texto, like, join_variantes, split_variantes, apply_patch
import media
import webhooks

bp_preguntas = Blueprint("preguntas", __name__)

# clave JSON -> columna
CAMPOS = {
    "categoria": "categoria",
    "necesidad": "necesidad",
    "pregunta": "pregunta",
    "respuesta": "respuesta",
    "variante": "variante",
    "imagenUrl": "urlimagen",
    "videoUrl": "videourl",
    "contexto": "contexto",
    "enlace": "enlace",
}
REQUERIDOS = ("categoria", "necesidad", "pregunta")


def _get(pregunta_id):
    return Pregunta.query.filter(Pregunta.id == pregunta_id,
                                 scope_filter(g.sesion, Pregunta.telefonocaso)).first()


def _con_cuenta(q):
    """Para admin: filas + nombre de la cuenta dueña del teléfono."""
    return (q.add_columns(Cuenta.nombre)
             .outerjoin(Cuenta, Cuenta.telefono == Pregunta.telefonocaso))


def _serializar(q):
    if es_admin(g.sesion):
        out = []
        for p, cuenta_nombre in _con_cuenta(q).all():
            d = p.to_dict()
            d["cuenta_nombre"] = cuenta_nombre
            out.append(d)
        return out
    return [p.to_dict() for p in q.all()]


def _guardar_media(p, data):
    """data-URLs inline (`imagen`, `video`) -> fichero en UPLOAD_DIR + URL pública en la fila."""
    for campo, attr in (("imagen", "urlimagen"), ("video", "videourl")):
        valor = data.get(campo)
        if not valor:
            continue
        ctype, contenido = media.parse_data_url(valor)
        if media.tipo_de(ctype) != campo:
            raise ValueError(f"El campo '{campo}' no contiene un {campo} válido")
        if len(contenido) > media.limite(campo):
            raise ValueError(f"El {campo} supera el tamaño máximo permitido")
        nombre = f"pregunta_{p.id}_{campo}.{media.extension(ctype)}"
        media.guardar(nombre, contenido)
        setattr(p, attr, media.public_url(nombre))


def _notificar(p):
    payload = {
        "id": p.id,
        "categoria": p.categoria,
        "necesidad": p.necesidad,
        "pregunta": p.pregunta,
        "respuesta": p.respuesta,
        "variantes": split_variantes(p.variante),
        "imagenUrl": p.urlimagen,
        "videoUrl": p.videourl,
    }
    ok, status = webhooks.post_json(p.enlace, payload)
    if not ok:
        current_app.logger.warning("[PREGUNTAS] id=%s respuesta guardada pero el enlace falló (%s)", p.id, status)


@bp_preguntas.get("/preguntas")
@require_module("preguntas")
def list_preguntas():
    q = Pregunta.query.filter(scope_filter(g.sesion, Pregunta.telefonocaso))
    categoria = texto(request.args.get("categoria"))
    necesidad = texto(request.args.get("necesidad"))
    if categoria:
        q = q.filter(Pregunta.categoria == categoria)
    if necesidad:
        q = q.filter(Pregunta.necesidad == necesidad)
    q = q.order_by(Pregunta.categoria.asc(), Pregunta.necesidad.asc(), Pregunta.pregunta.asc())
    return jsonify(_serializar(q))


@bp_preguntas.get("/preguntas-pendientes")
@require_module("preguntas", "conversaciones")
def list_pendientes():
    q = Pregunta.query.filter(Pregunta.habilitado.is_(False),
                              scope_filter(g.sesion, Pregunta.telefonocaso))
    categoria = texto(request.args.get("categoria"))
    if categoria:
        q = q.filter(Pregunta.categoria == categoria)
    busqueda = texto(request.args.get("busqueda"))
    if busqueda:
        patron = like(busqueda)
        q = q.filter(or_(Pregunta.pregunta.ilike(patron),
                         Pregunta.necesidad.ilike(patron),
                         Pregunta.categoria.ilike(patron),
                         Pregunta.contexto.ilike(patron)))
    return jsonify(_serializar(q.order_by(Pregunta.id.desc())))


@bp_preguntas.get("/preguntas/<int:pregunta_id>")
@require_module("preguntas")
def get_pregunta(pregunta_id: int):
    p = _get(pregunta_id)
    if not p:
        return jsonify(error="Pregunta no encontrada"), 404
    return jsonify(p.to_dict())


@bp_preguntas.post("/preguntas")
@require_module("preguntas")
def create_pregunta():
    data = request.get_json(silent=True) or {}
    categoria = texto(data.get("categoria"))
    necesidad = texto(data.get("necesidad"))
    pregunta = texto(data.get("pregunta"))
    if not categoria or not necesidad or not pregunta:
        return jsonify(error="Categoría, necesidad y pregunta son requeridos"), 400
    try:
        tel = tenant_key_for_write(g.sesion, data.get("telefonocaso"))
        variante = join_variantes(data.get("variante"))
    except ValueError as e:
        return jsonify(error=str(e)), 400

    respuesta = texto(data.get("respuesta"))
    p = Pregunta(
        telefonocaso=tel,
        categoria=categoria,
        necesidad=necesidad,
        pregunta=pregunta,
        respuesta=respuesta,
        variante=variante,
        urlimagen=texto(data.get("imagenUrl")),
        videourl=texto(data.get("videoUrl")),
        contexto=texto(data.get("contexto")),
        enlace=texto(data.get("enlace")),
        habilitado=bool(respuesta),
    )
    db.session.add(p)
    try:
        db.session.flush()  # id para el nombre del fichero
        _guardar_media(p, data)
    except ValueError as e:
        db.session.rollback()
        return jsonify(error=str(e)), 400
    db.session.commit()
    current_app.logger.info("[PREGUNTAS] creada id=%s %s/%s tenant=%s", p.id, categoria, necesidad, tel)
    return jsonify(p.to_dict()), 201


@bp_preguntas.put("/preguntas/<int:pregunta_id>")
@require_module("preguntas")
def update_pregunta(pregunta_id: int):
    data = request.get_json(silent=True) or {}
    p = _get(pregunta_id)
    if not p:
        return jsonify(error="Pregunta no encontrada"), 404

    try:
        cambios = apply_patch(p, data, CAMPOS, requeridos=REQUERIDOS,
                              convertir={"variante": join_variantes})
        _guardar_media(p, data)
    except ValueError as e:
        db.session.rollback()
        return jsonify(error=str(e)), 400

    respondida = bool(texto(data.get("respuesta")))
    if respondida:
        p.habilitado = True
    if not cambios and not (data.get("imagen") or data.get("video")):
        return jsonify(error="No hay campos para actualizar"), 400
    db.session.commit()
    current_app.logger.info("[PREGUNTAS] id=%s actualizada (%s) habilitado=%s",
                            p.id, ",".join(cambios), p.habilitado)

    if respondida and p.enlace:
        _notificar(p)
    return jsonify(p.to_dict())


@bp_preguntas.delete("/preguntas/<int:pregunta_id>")
@require_module("preguntas")
def delete_pregunta(pregunta_id: int):
    p = _get(pregunta_id)
    if not p:
        return jsonify(error="Pregunta no encontrada"), 404
    db.session.delete(p)
    db.session.commit()
    current_app.logger.info("[PREGUNTAS] eliminada id=%s", pregunta_id)
    return jsonify(success=True, message="Pregunta eliminada correctamente")
