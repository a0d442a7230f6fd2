# media.py: ficheros de imagen/vídeo en disco y data-URLs base64
import base64, binascii, os, re, uuid
from datetime import datetime
from flask import current_app
from werkzeug.utils import secure_filename

MAX_IMAGEN = 5 * 1024 * 1024
MAX_VIDEO  = 50 * 1024 * 1024

CONTENT_TYPES = {
    # imágenes
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "svg": "image/svg+xml",
    # vídeos
    "mp4": "video/mp4",
    "webm": "video/webm",
    "mov": "video/quicktime",
    "avi": "video/x-msvideo",
    "mkv": "video/x-matroska",
}
EXT_BY_MIME = {
    "image/jpeg": "jpg", "image/png": "png", "image/gif": "gif", "image/webp": "webp",
    "image/svg+xml": "svg", "video/mp4": "mp4", "video/webm": "webm",
    "video/quicktime": "mov", "video/x-msvideo": "avi", "video/x-matroska": "mkv",
}

DATA_URL_RE = re.compile(r"^data:([\w.+-]+/[\w.+-]+);base64,(.+)$", re.S)


def nombre_valido(filename: str) -> bool:
    if not filename:
        return False
    if ".." in filename or "/" in filename or "\\" in filename:
        return False
    return secure_filename(filename) == filename


def content_type_for(filename: str) -> str:
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    return CONTENT_TYPES.get(ext, "application/octet-stream")


def tipo_de(mimetype: str):
    """'imagen' | 'video' | None"""
    mt = (mimetype or "").lower()
    if mt.startswith("image/"):
        return "imagen"
    if mt.startswith("video/"):
        return "video"
    return None


def limite(tipo: str) -> int:
    return MAX_IMAGEN if tipo == "imagen" else MAX_VIDEO


def extension(mimetype: str, filename: str = "") -> str:
    ext = EXT_BY_MIME.get((mimetype or "").lower())
    if ext:
        return ext
    if filename and "." in filename:
        ext = filename.rsplit(".", 1)[-1].lower()
        if ext in CONTENT_TYPES:
            return ext
    return "bin"


def parse_data_url(value: str):
    """'data:image/png;base64,....' -> (content_type, bytes). ValueError si no cuadra."""
    if not isinstance(value, str):
        raise ValueError("Formato de data-URL inválido")
    m = DATA_URL_RE.match(value.strip())
    if not m:
        raise ValueError("Formato de data-URL inválido")
    try:
        data = base64.b64decode(m.group(2), validate=False)
    except (binascii.Error, ValueError):
        raise ValueError("Contenido base64 inválido")
    return m.group(1).lower(), data


def nombre_unico(prefijo: str, ext: str) -> str:
    stamp = datetime.utcnow().strftime("%Y%m%d%H%M%S")
    return f"{prefijo}_{stamp}_{uuid.uuid4().hex[:8]}.{ext}"


def guardar(nombre: str, data: bytes) -> str:
    base = current_app.config["UPLOAD_DIR"]
    os.makedirs(base, exist_ok=True)
    path = os.path.join(base, nombre)
    with open(path, "wb") as f:
        f.write(data)
    current_app.logger.info("[UPLOAD] guardado %s (%d bytes)", nombre, len(data))
    return path


def ruta(nombre: str) -> str:
    return os.path.join(current_app.config["UPLOAD_DIR"], nombre)


def public_url(nombre: str) -> str:
    return f"{current_app.config['PUBLIC_BASE_URL']}/api/uploads/{nombre}"
