from decimal import Decimal, InvalidOperation


def texto(v):
    """Recorta strings; vacío o None -> None."""
    if v is None:
        return None
    s = str(v).strip()
    return s or None


def like(v: str) -> str:
    return f"%{(v or '').strip()}%"


def to_bool(v):
    if isinstance(v, bool):
        return v
    s = str(v).strip().lower()
    if s in {"1", "true", "si", "sí", "activar"}:
        return True
    if s in {"0", "false", "no", "desactivar"}:
        return False
    raise ValueError(f"Valor booleano inválido: {v}")


def to_decimal(v):
    try:
        d = Decimal(str(v).strip())
    except (InvalidOperation, ValueError):
        raise ValueError(f"Valor numérico inválido: {v}")
    if not d.is_finite():
        raise ValueError(f"Valor numérico inválido: {v}")
    return d


def join_variantes(v):
    """Lista (o string ya unido) -> 'a;b;c'. None o lista vacía -> None."""
    if v is None:
        return None
    if isinstance(v, str):
        return texto(v)
    if not isinstance(v, (list, tuple)):
        raise ValueError("variante debe ser una lista de textos")
    items = []
    for item in v:
        if not isinstance(item, str):
            raise ValueError("variante debe ser una lista de textos")
        item = item.strip()
        if ";" in item:
            raise ValueError("Las variantes no pueden contener ';'")
        if item:
            items.append(item)
    return ";".join(items) or None


def split_variantes(s):
    if not s:
        return []
    return [v for v in s.split(";") if v]


def apply_patch(row, data, campos, requeridos=(), convertir=None):
    """Actualización parcial con semántica coalesce.

    - clave ausente en `data`  -> el valor guardado no cambia
    - clave presente con null  -> se limpia (ValueError si el campo es requerido)
    - strings se recortan; "" cuenta como null

    `campos` puede ser una lista de nombres o un dict {clave_json: atributo}.
    Devuelve la lista de atributos modificados.
    """
    mapa = campos if isinstance(campos, dict) else {c: c for c in campos}
    convertir = convertir or {}
    cambios = []
    for clave, attr in mapa.items():
        if clave not in data:
            continue
        valor = data[clave]
        if isinstance(valor, str):
            valor = valor.strip() or None
        if valor is not None and attr in convertir:
            valor = convertir[attr](valor)
        if valor is None and attr in requeridos:
            raise ValueError(f"El campo '{clave}' no puede quedar vacío")
        setattr(row, attr, valor)
        cambios.append(attr)
    return cambios
