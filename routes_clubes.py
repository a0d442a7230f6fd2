# routes_clubes.py: clubes por tenant (módulo "clubes")
from flask import Blueprint, request, jsonify, current_app, g
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from extensions import db
from models_clubes import Club
from auth_guard import require_module, scope_filter, tenant_key_for_write
from utils import texto, like

bp_clubes = Blueprint("clubes", __name__)


def _get(club_id):
    return Club.query.filter(Club.id == club_id,
                             scope_filter(g.sesion, Club.telefonocaso)).first()


def _nombre_ocupado(tel, nombre, excluir_id=None):
    # mismo tenant, sin distinguir mayúsculas
    q = Club.query.filter(Club.telefonocaso == tel,
                          func.lower(Club.nombre) == nombre.lower())
    if excluir_id:
        q = q.filter(Club.id != excluir_id)
    return db.session.query(q.exists()).scalar()


@bp_clubes.get("/clubes")
@require_module("clubes")
def list_clubes():
    q = Club.query.filter(scope_filter(g.sesion, Club.telefonocaso))
    nombre = texto(request.args.get("nombre"))
    if nombre:
        q = q.filter(Club.nombre.ilike(like(nombre)))
    return jsonify([c.to_dict() for c in q.order_by(Club.nombre.asc()).all()])


@bp_clubes.get("/clubes/<int:club_id>")
@require_module("clubes")
def get_club(club_id: int):
    club = _get(club_id)
    if not club:
        return jsonify(error="Club no encontrado"), 404
    return jsonify(club.to_dict())


@bp_clubes.post("/clubes")
@require_module("clubes")
def create_club():
    data = request.get_json(silent=True) or {}
    nombre = texto(data.get("nombre"))
    if not nombre:
        return jsonify(error="El nombre del club es requerido"), 400
    try:
        tel = tenant_key_for_write(g.sesion, data.get("telefonocaso"))
    except ValueError as e:
        return jsonify(error=str(e)), 400
    if _nombre_ocupado(tel, nombre):
        return jsonify(error="Ya existe un club con ese nombre"), 400

    club = Club(nombre=nombre, telefonocaso=tel)
    db.session.add(club)
    try:
        db.session.flush()
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify(error="Ya existe un club con ese nombre"), 400
    current_app.logger.info("[CLUBES] creado id=%s tenant=%s", club.id, tel)
    return jsonify(club.to_dict()), 201


@bp_clubes.put("/clubes/<int:club_id>")
@require_module("clubes")
def update_club(club_id: int):
    data = request.get_json(silent=True) or {}
    nombre = texto(data.get("nombre"))
    if not nombre:
        return jsonify(error="El nombre del club es requerido"), 400
    club = _get(club_id)
    if not club:
        return jsonify(error="Club no encontrado"), 404
    if _nombre_ocupado(club.telefonocaso, nombre, excluir_id=club.id):
        return jsonify(error="Ya existe otro club con ese nombre"), 400

    club.nombre = nombre
    try:
        db.session.flush()
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify(error="Ya existe otro club con ese nombre"), 400
    current_app.logger.info("[CLUBES] actualizado id=%s", club.id)
    return jsonify(club.to_dict())


@bp_clubes.delete("/clubes/<int:club_id>")
@require_module("clubes")
def delete_club(club_id: int):
    club = _get(club_id)
    if not club:
        return jsonify(error="Club no encontrado"), 404
    db.session.delete(club)
    db.session.commit()
    current_app.logger.info("[CLUBES] eliminado id=%s", club_id)
    return jsonify(success=True, id=club_id)
