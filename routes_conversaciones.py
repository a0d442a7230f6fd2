# routes_conversaciones.py: conversaciones escaladas a un humano y su respuesta
from flask import Blueprint, Response, request, jsonify, current_app, g
from sqlalchemy import or_, select

from extensions import db
from models_chatbot import Conversacion
from models_usuarios import UsuarioSistema
from auth_guard import require_admin, require_module, scope_filter
from utils import texto, to_bool
import media
import webhooks

bp_conversaciones = Blueprint("conversaciones", __name__)

ESTADOS = ("pendiente", "completado")


def _nombreusuario():
    # un teléfono puede repetirse en usuariossystem: se toma uno solo, del mismo tenant
    return (select(UsuarioSistema.nombre)
            .where(UsuarioSistema.telefono == Conversacion.telefonocliente,
                   UsuarioSistema.telefonocaso == Conversacion.telefonoempresa)
            .limit(1)
            .scalar_subquery())


def _visibles():
    return Conversacion.query.filter(scope_filter(g.sesion, Conversacion.telefonoempresa))


@bp_conversaciones.get("/conversaciones")
@require_module("conversaciones")
def list_conversaciones():
    q = _visibles()
    estado = texto(request.args.get("estado"))
    if estado:
        if estado not in ESTADOS:
            return jsonify(error="Estado inválido"), 400
        q = q.filter(Conversacion.estado == estado)
    paso = texto(request.args.get("paso"))
    if paso:
        q = q.filter(Conversacion.paso == paso)
    accion = texto(request.args.get("accion"))
    if accion:
        q = q.filter(Conversacion.accionadmin == accion)
    bloqueado = texto(request.args.get("bloqueado"))
    if bloqueado:
        try:
            bloqueado = to_bool(bloqueado)
        except ValueError as e:
            return jsonify(error=str(e)), 400
        q = q.filter(Conversacion.bloqueado.is_(True) if bloqueado
                     else or_(Conversacion.bloqueado.is_(False), Conversacion.bloqueado.is_(None)))
    rows = (q.add_columns(_nombreusuario().label("nombreusuario"))
             .order_by(Conversacion.creado.desc(), Conversacion.id.desc())
             .all())
    return jsonify([c.to_dict(nombreusuario=nombre) for c, nombre in rows])


@bp_conversaciones.get("/conversacion/<guid>")
@require_module("conversaciones")
def get_conversacion(guid):
    row = (_visibles().filter(Conversacion.guid == guid)
           .add_columns(_nombreusuario().label("nombreusuario"))
           .first())
    if not row:
        return jsonify(error="Conversación no encontrada"), 404
    c, nombre = row
    return jsonify(c.to_dict(nombreusuario=nombre))


@bp_conversaciones.post("/enviar-respuesta")
@require_module("conversaciones")
def enviar_respuesta():
    data = request.get_json(silent=True) or {}
    guid = texto(data.get("guid"))
    enlace = texto(data.get("enlace"))
    respuesta = texto(data.get("respuesta"))
    if not guid or not enlace or not respuesta:
        return jsonify(error="Faltan datos requeridos"), 400

    c = _visibles().filter(Conversacion.guid == guid).first()
    if not c:
        return jsonify(error="Conversación no encontrada"), 404
    if c.estado == "completado":
        return jsonify(error="La conversación ya fue respondida"), 400

    destino = c.enlace or enlace
    if not webhooks.enlace_valido(destino):
        return jsonify(error="Enlace de respuesta inválido"), 400

    # la transición solo la gana una petición: UPDATE condicionado al estado
    n = (Conversacion.query
         .filter(Conversacion.id == c.id,
                 or_(Conversacion.estado.is_(None), Conversacion.estado != "completado"))
         .update({"estado": "completado", "respuesta": respuesta,
                  "accionadmin": texto(data.get("accion"))},
                 synchronize_session=False))
    if not n:
        db.session.rollback()
        return jsonify(error="La conversación ya fue respondida"), 400
    db.session.commit()
    current_app.logger.info("[CONVERSACIONES] guid=%s completada por %s", guid, g.sesion.get("usuario"))

    payload = {"guid": guid, "respuesta": respuesta}
    for clave in ("accion", "imagenUrl", "videoUrl"):
        if texto(data.get(clave)):
            payload[clave] = texto(data.get(clave))
    ok, status = webhooks.post_json(destino, payload)
    if not ok:
        # el cambio local se mantiene
        current_app.logger.error("[CONVERSACIONES] guid=%s webhook falló status=%s", guid, status)
        return jsonify(error="Error al enviar respuesta"), 500
    return jsonify(success=True, conversacion=c.to_dict())


@bp_conversaciones.delete("/conversacion/<guid>")
@require_admin
def delete_conversacion(guid):
    c = Conversacion.query.filter(Conversacion.guid == guid).first()
    if not c:
        return jsonify(error="Registro no encontrado"), 404
    db.session.delete(c)
    db.session.commit()
    current_app.logger.info("[CONVERSACIONES] guid=%s eliminada por %s", guid, g.sesion.get("usuario"))
    return jsonify(success=True, guid=guid)


def _servir_inline(guid, campo):
    c = _visibles().filter(Conversacion.guid == guid).first()
    if not c:
        return jsonify(error="Registro no encontrado"), 404
    valor = getattr(c, campo)
    if not valor:
        return jsonify(error=f"Este registro no tiene {campo}"), 404
    try:
        ctype, contenido = media.parse_data_url(valor)
    except ValueError:
        return jsonify(error=f"Formato de {campo} inválido"), 400
    resp = Response(contenido, mimetype=ctype)
    resp.headers["Cache-Control"] = "public, max-age=86400"
    return resp


@bp_conversaciones.get("/imagen-respuesta/<guid>")
@require_module("conversaciones")
def imagen_respuesta(guid):
    return _servir_inline(guid, "imagen")


@bp_conversaciones.get("/video-respuesta/<guid>")
@require_module("conversaciones")
def video_respuesta(guid):
    return _servir_inline(guid, "video")
