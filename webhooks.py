# webhooks.py: POST JSON a los enlaces de callback del flujo del bot (n8n u otros)
from urllib.parse import urlparse

import requests
from flask import current_app


def enlace_valido(url: str) -> bool:
    try:
        p = urlparse(url or "")
    except ValueError:
        return False
    return p.scheme in ("http", "https") and bool(p.netloc)


def post_json(url: str, payload: dict):
    """Devuelve (ok, status). status=None si no hubo respuesta HTTP."""
    if not enlace_valido(url):
        current_app.logger.warning("[WEBHOOK] enlace inválido: %r", url)
        return False, None
    try:
        r = requests.post(
            url,
            json=payload,
            headers={"Content-Type": "application/json"},
            timeout=current_app.config["WEBHOOK_TIMEOUT"],
        )
    except requests.RequestException as e:
        current_app.logger.warning("[WEBHOOK] fallo enviando a %s: %s", url, e)
        return False, None
    ok = 200 <= r.status_code < 300
    log = current_app.logger.info if ok else current_app.logger.warning
    log("[WEBHOOK] %s -> %s %s", url, r.status_code, (r.text or "")[:300])
    return ok, r.status_code
