# models_usuarios.py: usuarios finales del bot (aprobación / asignación)
from datetime import datetime
from extensions import db


class UsuarioSistema(db.Model):
    __tablename__ = "usuariossystem"
    id           = db.Column(db.Integer, primary_key=True)
    creado       = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    telefonocaso = db.Column(db.String(40), index=True)
    nombre       = db.Column(db.String(200))
    telefono     = db.Column(db.String(40), index=True)
    cuenta       = db.Column(db.String(120))
    contrasena   = db.Column(db.String(255))             # hash werkzeug
    proceso      = db.Column(db.String(120))
    aprobar      = db.Column(db.Boolean, default=False)
    asignacion   = db.Column(db.String(16))               # activar|desactivar

    def to_dict(self):
        return {
            "id": self.id,
            "telefonocaso": self.telefonocaso,
            "nombre": self.nombre,
            "telefono": self.telefono,
            "cuenta": self.cuenta,
            "proceso": self.proceso,
            "aprobar": bool(self.aprobar),
            "asignacion": self.asignacion,
            "tiene_contrasena": bool(self.contrasena),
        }
