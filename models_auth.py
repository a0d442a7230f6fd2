# models_auth.py
from datetime import datetime
from extensions import db

TIPO_ADMIN   = "Administrador"
TIPO_USUARIO = "Usuario"
TIPOS_USUARIO = {TIPO_ADMIN, TIPO_USUARIO}
ESTADOS_CUENTA = {"activo", "bloqueado"}


class Cuenta(db.Model):
    __tablename__ = "cuentassystem"
    id          = db.Column(db.Integer, primary_key=True)
    creado      = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    modificado  = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    nombre      = db.Column(db.String(200))
    tipousuario = db.Column(db.String(32), nullable=False, default=TIPO_USUARIO)  # Administrador|Usuario
    usuario     = db.Column(db.String(120), unique=True, nullable=False, index=True)
    contrasena  = db.Column(db.String(255), nullable=False)                        # hash werkzeug
    correo      = db.Column(db.String(200), unique=True)
    telefono    = db.Column(db.String(40), unique=True, index=True)                # clave de tenant
    estado      = db.Column(db.String(16), nullable=False, default="activo")       # activo|bloqueado
    modulos     = db.Column(db.JSON, nullable=False, default=list)

    def to_dict(self):
        return {
            "id": self.id,
            "nombre": self.nombre,
            "tipousuario": self.tipousuario,
            "usuario": self.usuario,
            "correo": self.correo,
            "telefono": self.telefono,
            "estado": self.estado,
            "modulos": list(self.modulos or []),
        }


class Modulo(db.Model):
    __tablename__ = "modulossystem"
    id         = db.Column(db.Integer, primary_key=True)
    nombre     = db.Column(db.String(80), unique=True, nullable=False)
    categoria  = db.Column(db.String(80))
    creado     = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    modificado = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "nombre": self.nombre,
            "categoria": self.categoria,
            "creado": self.creado.isoformat() if self.creado else None,
            "modificado": self.modificado.isoformat() if self.modificado else None,
        }
