# routes_upload.py: subida de imágenes/vídeos a disco y descarga pública
import os
from flask import Blueprint, request, jsonify, current_app, send_file

from auth_guard import require_session
import media

bp_upload = Blueprint("upload", __name__)


@bp_upload.post("/upload")
@require_session
def upload():
    """
    form-data:
      file: fichero (image/* o video/*)
      tipo: imagen|video (opcional, prefijo del nombre)
    """
    fs = request.files.get("file")
    if not fs or not fs.filename:
        return jsonify(error="No se proporciono archivo"), 400

    tipo = media.tipo_de(fs.mimetype)
    if not tipo:
        return jsonify(error="Solo se permiten imagenes y videos"), 400

    b = fs.read()
    if not b:
        return jsonify(error="El archivo está vacío"), 400
    if len(b) > media.limite(tipo):
        return jsonify(error=f"El archivo no debe superar {'5MB' if tipo == 'imagen' else '50MB'}"), 400

    prefijo = (request.form.get("tipo") or "").strip()
    if prefijo not in ("imagen", "video"):
        prefijo = tipo
    nombre = media.nombre_unico(prefijo, media.extension(fs.mimetype, fs.filename))
    media.guardar(nombre, b)
    return jsonify(success=True, filename=nombre, url=media.public_url(nombre), tipo=tipo)


@bp_upload.get("/uploads/<path:filename>")
def serve_upload(filename):
    if not media.nombre_valido(filename):
        current_app.logger.warning("[UPLOAD] nombre rechazado: %r", filename)
        return jsonify(error="Nombre de archivo invalido"), 400
    path = media.ruta(filename)
    if not os.path.isfile(path):
        return jsonify(error="Archivo no encontrado"), 404
    return send_file(path, mimetype=media.content_type_for(filename), max_age=86400)
